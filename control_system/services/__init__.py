"""Services Layer — background producers, snapshot channels and the frame loop.

Invariants:
    - Each producer task is the single writer of its channel
    - Producers and consumer communicate only through channels and the command queue
"""
