"""
HTTP layer.

``router`` aggregates the resource routers from ``endpoints``;
``deps`` holds the dependencies shared between them.
"""
