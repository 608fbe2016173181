"""Services Layer - orchestration over core logic and infrastructure adapters.

Invariants:
    - Identity resolution, bulk sync and protocol sync never raise to their callers
    - Only EventGenerationService propagates errors, always as EventMakerError

Design Decisions:
    - One service per concern, wired together in api/dependencies.py
"""
