"""
Main entrypoint for the Todo API.

This module assembles the FastAPI application: it sets up logging,
constructs the ``Database`` handle, registers error handlers and
includes the routers.  ``create_app`` builds and configures the app,
which is then instantiated at module import time as ``app`` so it can
be served directly, e.g.::

    uvicorn todo_api.app.main:app --reload

The datastore is opened (migrations applied) when the application
starts and released when it shuts down.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from .api.router import router
from .core.config import Settings, settings as default_settings
from .core.db import Database
from .core.errors import register_exception_handlers
from .core.logging_config import setup_logging
from .core.security import PasswordPolicy, min_length_policy

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    password_policy: Optional[PasswordPolicy] = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use.  Defaults to the settings loaded from the
        environment at import time.
    database : Optional[Database]
        Datastore handle.  Defaults to one built from
        ``settings.database_url``.
    password_policy : Optional[PasswordPolicy]
        Predicate applied to passwords at signup.  Defaults to a
        minimum length check using ``settings.min_password_length``.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    settings = settings or default_settings
    setup_logging(settings.log_level, settings.log_file or None)

    database = database or Database(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        database.open()
        logger.info("Datastore ready at %s (%s)", database.path, settings.environment)
        try:
            yield
        finally:
            database.close()

    app = FastAPI(title=settings.project_name, version=settings.api_version, lifespan=lifespan)
    app.state.settings = settings
    app.state.db = database
    app.state.password_policy = password_policy or min_length_policy(settings.min_password_length)

    register_exception_handlers(app)
    app.include_router(router)
    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
