"""QR Attendance package.

This package is organized by feature modules (tokens, attendance, sessions, users, ...)
with a thin Flask controller layer and service/repository layers underneath.
"""
