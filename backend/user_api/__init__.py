"""User API Package - validated user CRUD over an in-memory store.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
