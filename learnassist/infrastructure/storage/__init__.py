"""Persistent key-value storage."""
