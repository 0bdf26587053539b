"""Response Cache Implementation.

Provides the in-memory ResponseCache used for idempotent GET requests,
with a uniform TTL and a size bound.
Bounded Context: Cache Management
"""
