# src/seqtask/api/app.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from seqtask import __version__
from seqtask.config import load_settings
from seqtask.engine import StepRegistry, TaskManager, default_registry
from seqtask.logging import configure_logging, get_logger

from .routes import router

_LOG = get_logger(__name__)


def create_app(
    registry: Optional[StepRegistry] = None,
    manager: Optional[TaskManager] = None,
) -> FastAPI:
    """
    Builds the API around a step registry and a task manager.

    Step types must be registered before tasks using them are submitted;
    the module-level `app` uses the default registry.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """
        Responsible for:
        - loading settings
        - configuring logging
        - exposing registry / manager on app.state
        - letting in-flight task runs settle on shutdown
        """
        settings = load_settings()
        configure_logging(settings.log_level)

        app.state.settings = settings
        app.state.registry = registry if registry is not None else default_registry
        app.state.manager = manager if manager is not None else TaskManager()

        _LOG.info("Startup complete (%d step type(s) registered).", len(app.state.registry.keys()))

        try:
            yield
        finally:
            manager_obj = getattr(app.state, "manager", None)
            if manager_obj is not None:
                await manager_obj.drain()
            _LOG.info("Shutdown complete.")

    app = FastAPI(
        title="Sequential Task Engine",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(router)
    return app


app = create_app()
