"""Application package for the Report Card school-records backend.

This package exposes the model, repository and service modules used by
the FastAPI application in `reportcard.main`. It is intentionally
lightweight; individual modules contain the concrete implementations
and documentation.
"""
