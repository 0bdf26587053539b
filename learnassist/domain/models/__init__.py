"""Domain models: value objects, task snapshots, request/response records
and the error taxonomy.
"""
