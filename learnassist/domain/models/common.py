"""Defines common Value Objects used across different domain contexts.

These objects represent simple values or concepts like endpoint paths,
task identifiers, cache keys and credentials, ensuring consistency and
type safety.
"""

from typing import Any, Dict, NewType, Optional

# === Transport Context ===
EndpointPath = NewType("EndpointPath", str)   # Path relative to the API base URL, e.g. '/api/image/upload'
QueryParams = Dict[str, Any]                   # Query string parameters of a GET request

# === Auth Context ===
AuthToken = NewType("AuthToken", str)          # Opaque bearer credential
StorageKey = NewType("StorageKey", str)        # Key in the persistent key-value store

# === Caching Context ===
CacheKey = NewType("CacheKey", str)            # Fingerprint of (path, normalized params)

# === Task Context ===
TaskId = NewType("TaskId", str)                # Opaque server-side task identifier
QuestionId = NewType("QuestionId", str)        # Identifier of an analysed question


def make_task_path(base: str, task_id: Optional[str]) -> EndpointPath:
    """Joins a result endpoint and a task/question id ('/api/x/result' + 't1')."""
    return EndpointPath(f"{base.rstrip('/')}/{task_id}")
