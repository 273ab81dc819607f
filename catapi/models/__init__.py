"""
Cat API — ORM Models
=====================

Importing this package registers every table with ``Base.metadata``
(Alembic autogenerate and ``database.create_all`` rely on that).
"""

from catapi.models.cat import Cat
from catapi.models.user import User

__all__ = ["Cat", "User"]
