"""
Persistence backends.

Components:
- hub.py: per-user snapshot fan-out shared by the backends
- documents.py: document field validation + id minting
- json_backend.py: local JSON blob (single file, all users)
- sqlite_backend.py: SQLite document collection (one row per task)
- files.py: JSON object read + atomic 0600 write, shared with auth and notify
"""
