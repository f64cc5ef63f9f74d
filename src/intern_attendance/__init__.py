"""Intern Attendance package.

Organized by feature modules (attendance, approvals, profiles, reports) with a
thin Flask JSON controller layer over service/repository layers.
"""
