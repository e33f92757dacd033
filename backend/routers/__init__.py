"""Routers module - FastAPI route handlers"""

from . import config, edit, files

__all__ = ["config", "edit", "files"]
