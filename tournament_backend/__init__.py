"""
Backend package for the tournament sync API.

This package provides a FastAPI application that loads, saves and deletes
tournament records in a key-value store, with every mutation gated by a
hashed admin token.
"""
