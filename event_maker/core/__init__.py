"""Core Layer - pure domain logic, no IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic (fallback id generation excepted)
    - IO boundaries are expressed as Protocols in repository_protocols.py

Design Decisions:
    - Functional core separated from imperative shell
"""
