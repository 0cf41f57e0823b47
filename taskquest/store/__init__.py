"""Persistence for the shared user document.

This package contains:
- The SQLAlchemy engine cache and table models.
- A small repository layer for the JSON document and anonymous sessions.
- A polling watcher that turns revision changes into subscriber callbacks.
- ``UserStore``, the typed facade the UI and services talk to.
"""
