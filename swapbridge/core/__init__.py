"""Core Layer — pure domain logic: types, errors, amount parsing, aggregation.

Invariants:
    - Core never imports from infrastructure/, services/ or api/
    - No IO in core: network and persistence access go through protocols

Design Decisions:
    - Functional core / imperative shell: services orchestrate IO around these functions
"""
