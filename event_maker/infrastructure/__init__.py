"""Infrastructure Layer - external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All external calls wrapped with timeout and error mapping onto the ErrorKind taxonomy

Design Decisions:
    - Adapters implement the Protocols in core/repository_protocols.py
"""
