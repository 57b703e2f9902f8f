"""Pydantic Schemas: typed filter inputs and stats outputs at the service boundary.

Invariants:
    - Schemas validate at the boundary (filter intent in, aggregates out)
    - Domain enums from core/ used for enum fields

Design Decisions:
    - Separate from models: schemas are caller contracts, models are persistence
"""
