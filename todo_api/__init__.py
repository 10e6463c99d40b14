"""
Top-level package for the Todo API.

The web application lives in ``todo_api.app``; the command line entry
point is ``todo_api.cli``.
"""

__all__ = []
