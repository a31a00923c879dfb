"""Services Layer - request orchestration for the user resource.

Invariants:
    - Handlers depend on core Protocols, never on the concrete pool
"""
