"""Core simulation primitives (world events).

Kept free of FastAPI concerns so it can be reused by API routes, the CLI driver, and tests.
"""
