"""
Pydantic schema definitions for API payloads.

Schemas are kept separate from the storage layout so that the wire
representation (``completedAt``, ``ownerId``) can differ from column
names.
"""
