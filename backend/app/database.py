"""
Database session access for the API layer.

Re-exports from the unified community.db module so routers and tests share
one ``get_db`` to depend on and override:
    from community.db import db, get_db, Base

Initialization happens explicitly in main.py startup, NOT at import time.
"""

from community.db import db, get_db

__all__ = ["db", "get_db"]
