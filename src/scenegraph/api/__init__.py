"""FastAPI application exposing scenario layout and validation endpoints."""

from .app import create_app
from .settings import SceneGraphApiSettings

__all__ = ["create_app", "SceneGraphApiSettings"]
