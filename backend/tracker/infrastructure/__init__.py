"""Infrastructure Layer: the store handle, generic repository, predicate compiler, logging.

Invariants:
    - Infrastructure depends on core/ types, never on services/
    - Every database failure leaves this layer as a TrackerError

Design Decisions:
    - Predicate trees are built in core/ and compiled here, so query intent stays pure
"""
