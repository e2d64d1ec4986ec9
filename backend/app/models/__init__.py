"""
RedSocial Backend — ORM Models Package
========================================

Importing this package registers every table on Base.metadata, which
Alembic autogenerate and the test suite's create_all() rely on.
"""

from app.models.user import User
from app.models.follow import Follow
from app.models.publication import Publication
from app.models.comment import Comment

__all__ = ["User", "Follow", "Publication", "Comment"]
