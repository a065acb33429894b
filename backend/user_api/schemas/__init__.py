"""Pydantic Schemas - request/response shapes for the HTTP boundary.

Invariants:
    - Schemas only check JSON shape and types; field rules live in core.validate_user
"""
