"""Core Layer — domain models, view state and reducers. No IO, no async.

Invariants:
    - No module in core/ imports from services/ or infrastructure/
    - All functions are pure and deterministic (clock passed in where needed)
"""
