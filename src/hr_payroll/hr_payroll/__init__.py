"""HR leave approval and payroll package.

Organized by feature modules (leaves, attendance, payroll, employees) with a
thin Flask controller layer over service and repository layers that talk to
a pluggable document store.
"""
