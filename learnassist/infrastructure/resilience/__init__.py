"""API Resilience Implementations.

Contains the retry service with exponential backoff for connectivity
failures and the cooperative cancellation token.
Bounded Context: API Resilience
"""
