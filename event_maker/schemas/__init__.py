"""Pydantic Schemas - request/response validation and the generated config shape.

Invariants:
    - Schemas validate at system boundary (user input, generator output, API responses)
    - Domain types from core/ used for enum fields

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
