"""
Local single-user task tracker.

Packages:
- core/: application state, error taxonomy, date helpers, storage ports
- storage/: SQLite-backed namespaced key/value store
- accounts/: credential store, session manager, sign-in/registration API
- tasks/: task models, per-account task store, view engine, CSV export
- cli/ + connectors/: composition root, slash commands, console REPL
"""

__version__ = "0.3.0"
