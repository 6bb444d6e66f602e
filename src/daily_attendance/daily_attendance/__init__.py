"""Daily Attendance package.

Organized by feature modules (attendance, employees) with a thin Flask
controller layer over service/repository layers. The attendance store is a
keyed document store with single-document transactions.
"""
