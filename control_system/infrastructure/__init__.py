"""Infrastructure Layer — GitHub HTTP client, disk cache, host metrics, logging.

Invariants:
    - External failures are mapped to ControlSystemError subclasses (core/errors.py)
    - No module here owns a task or a loop; services/ drives them
"""
