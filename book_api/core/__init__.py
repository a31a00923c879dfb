"""Core Layer - error taxonomy and boundary contracts, no IO.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
"""
