"""
Brainboard Backend: Application Package
=======================================

What: Collaborative whiteboard API. Users own boards, boards hold positioned
      text and image cards, and access is delegated either to other users
      (access grants) or to anonymous holders of a share link.

Architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, permission checks
    ├─────────────────────────────────────┤
    │   Services (Permissions & Stores)   │  ← resolver, boards, cards, shares
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database / Object Storage (I/O)   │  ← async sessions, S3 or local disk
    └─────────────────────────────────────┘

    The database handle and the object storage backend are created by the
    application factory and handed to the layers above; nothing reaches for
    a process-wide engine.
"""

__version__ = "1.0.0"
