"""Core Layer - pure domain logic, no IO, no async, no HTTP.

Invariants:
    - No module in core/ imports from services/, api/, schemas/ or infrastructure/
    - Validation and record construction are pure and deterministic given their inputs
"""
