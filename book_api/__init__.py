"""Book API Package - user-account resource over HTTP.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
