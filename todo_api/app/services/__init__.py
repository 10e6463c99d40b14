"""
Service layer.

Each service encapsulates the business logic for a resource and talks
to the datastore through the injected ``Database`` handle.
"""
