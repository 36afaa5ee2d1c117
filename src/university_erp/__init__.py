"""University ERP backend package.

Organized by feature modules (hr, payroll, certification, multicampus,
admission, finance) with a thin Flask controller layer on top of
service/repository layers.
"""
