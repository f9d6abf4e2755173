"""Services Layer — the imperative shell around the pure core.

Invariants:
    - Every write operation is one transaction (load, lock, apply core decision, commit)
    - Services raise SoundopeError subclasses; routes never catch them

Design Decisions:
    - One service class per aggregate concern: discovery, boosts, votes
"""
