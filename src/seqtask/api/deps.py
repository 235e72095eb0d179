# src/seqtask/api/deps.py
from __future__ import annotations

from fastapi import Request

from seqtask.config import Settings
from seqtask.engine import StepRegistry, TaskManager


def get_settings(request: Request) -> Settings:
    """
    Per-request access to settings stored on app.state during startup.
    """
    return request.app.state.settings  # type: ignore[attr-defined]


def get_manager(request: Request) -> TaskManager:
    return request.app.state.manager  # type: ignore[attr-defined]


def get_registry(request: Request) -> StepRegistry:
    return request.app.state.registry  # type: ignore[attr-defined]
