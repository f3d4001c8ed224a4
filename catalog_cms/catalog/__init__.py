"""Catalog storage.

In-memory and SQLAlchemy implementations of the catalog store used by
the workflow engine.
"""
