"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority)
- task_store.py: per-account collection with write-through persistence
- view.py: status filter -> agenda window -> sort pipeline
- export.py: CSV rendering of a visible sequence
- task_api.py: small high-level helpers used by the front end
"""
