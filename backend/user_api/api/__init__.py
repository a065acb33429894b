"""API Layer - FastAPI routes, middleware and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Every response uses the status/message/data/error/trace_id envelope
"""
