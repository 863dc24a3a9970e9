"""Service Layer — swap lifecycle orchestration around the pure core.

Invariants:
    - Services receive an AsyncSession and the network client mapping via constructor
    - All cross-request coordination goes through DB constraints and atomic writes
"""
