"""
Backend package for the address verification service.

This package provides a FastAPI application serving the customer
address-confirmation flow and the admin dashboard, with identity and
document store abstractions so the same code runs against Firebase, a SQL
database or in-memory backends.
"""
