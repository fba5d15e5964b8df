"""
Test support utilities for valoa-db tests.

Helpers that are not fixtures themselves but are shared across test files.
"""
