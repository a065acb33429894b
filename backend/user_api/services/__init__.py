"""Services Layer - use-case orchestration between the HTTP shell and the core.

Invariants:
    - Services own identifier generation and clock access (injected collaborators)
    - Errors from core and store propagate unchanged to the API layer
"""
