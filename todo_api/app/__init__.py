"""
Application package.

Layout:

* ``core`` - configuration, logging, errors, the datastore gateway
  and security primitives;
* ``schemas`` - pydantic request and response models;
* ``services`` - business logic, one class per resource;
* ``api`` - FastAPI routers and shared dependencies.

``create_app`` in ``main`` wires these together.
"""
