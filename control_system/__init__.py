"""Control System — desk dashboard for GitHub activity and host metrics.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
