"""Infrastructure Layer - storage backends and cross-cutting concerns (logging, tracing).

Invariants:
    - Storage backends satisfy core.repository_protocols.UserRepository
    - Tracing is optional: every traced component accepts an injected Tracer
"""
