"""
Jam Session Backend — SQLAlchemy ORM models.

Importing this package registers every mapped class (and the association
table) with Base.metadata, which Alembic and relationship() lookups need.
"""

from jamsession.models.user import User                          # noqa: F401
from jamsession.models.jam import Jam, jam_attendants             # noqa: F401
