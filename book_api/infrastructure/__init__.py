"""Infrastructure - connection pool, credential hashing, logging setup.

Invariants:
    - Nothing here contains request/response decisions (those live in services/)
"""
