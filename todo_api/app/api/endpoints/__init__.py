"""
Endpoint modules.

Each module defines an ``APIRouter`` for one resource (todos, users).
The routers are aggregated in ``api/router.py``.
"""
