# src/seqtask/api/__init__.py
"""
API layer for seqtask (FastAPI).

- app: FastAPI factory + lifecycle hooks
- routes: REST endpoints
- deps: dependency injection helpers
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
