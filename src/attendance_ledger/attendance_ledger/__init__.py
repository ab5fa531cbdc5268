"""Attendance Ledger package.

Feature modules (employees, attendance, requests, ledger, ...) keep business
rules in plain services over repository interfaces; Flask controllers and the
MySQL store are thin layers around them.
"""
