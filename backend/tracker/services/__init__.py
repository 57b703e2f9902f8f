"""Services Layer: company, job and contact lifecycles over the shared store handle.

Invariants:
    - Services receive the Store in their constructor; none reaches for a global
    - Every write validates first and runs inside exactly one Store.transaction()
    - Not-found is a None / False return; validation failure is a returned ValidationResult

Design Decisions:
    - One service per aggregate, composed from generic Repository instances
"""
