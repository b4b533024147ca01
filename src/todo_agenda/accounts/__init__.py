"""
Account subsystem.

Components:
- models.py: Account (public view) and AccountRecord (stored form)
- credential_store.py: registration / authentication, password hashing
- session.py: persisted "who is signed in" pointer
- auth_api.py: high-level helpers that also switch the task collection
"""
