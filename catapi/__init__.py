"""
Cat API — Application Package
===============================

REST backend for a cat-sharing app: registered users upload cat photos
whose location is read from the photo, browse cats on a map by bounding
box, and manage their own records. One fixed admin account may edit or
delete any cat.

Layers:
    ┌─────────────────────────────────────┐
    │   routes/      HTTP surface         │  thin handlers, auth dependencies
    ├─────────────────────────────────────┤
    │   services/    business rules       │  owner/admin checks, geo, photos
    ├─────────────────────────────────────┤
    │   models/ + schemas/                │  SQLAlchemy rows, Pydantic payloads
    ├─────────────────────────────────────┤
    │   database.py  async sessions       │
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
