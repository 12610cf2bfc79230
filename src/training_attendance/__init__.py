"""Training Attendance package.

Feature modules (sessions, enrollments, registrations, attendance, statistics, ...)
sit behind a thin Flask controller layer with service/repository layers underneath.
"""
