"""
Community Issues core library.

Holds configuration, logging, persistence, repositories and the services
behind the HTTP API in ``backend/app``.

Usage:
    from community.config import get_settings
    from community.db import db
    from community.models import Issue, User
    from community.services import IssueService

Import from submodules directly; nothing is re-exported here to keep
settings/logging initialization free of import cycles.
"""

__version__ = "1.0.0"
