"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - User and Track are the two aggregates a write may lock

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from app.models.user import User  # noqa: F401
from app.models.track import Track  # noqa: F401
from app.models.vote import Vote  # noqa: F401
from app.models.boost import Boost  # noqa: F401
from app.models.archive_log import ArchiveLog  # noqa: F401
