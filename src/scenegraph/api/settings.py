"""Configuration helpers for deploying the scene graph API."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from ..layout import (
    DEFAULT_HORIZONTAL_SPACING,
    DEFAULT_LEVEL_SPACING,
    DEFAULT_MAX_DEPTH,
    LayoutSettings,
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _normalise_path(value: str | None) -> Path | None:
    if value is None:
        return None

    trimmed = value.strip()
    if not trimmed:
        return None

    return Path(trimmed).expanduser()


def _parse_positive_float(value: str | None, *, name: str, default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        parsed = float(value.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be a number.") from exc
    if parsed <= 0:
        raise ValueError(f"{name} must be greater than zero.")
    return parsed


def _parse_positive_int(value: str | None, *, name: str, default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be a positive integer.") from exc
    if parsed < 1:
        raise ValueError(f"{name} must be greater than zero.")
    return parsed


def _parse_bool(value: str | None, *, name: str, default: bool) -> bool:
    if value is None or not value.strip():
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag.")


@dataclass(frozen=True)
class SceneGraphApiSettings:
    """Deployment settings for the FastAPI application.

    Values are read from environment variables. Empty strings are treated as
    if the variable was unset. Without ``store_root`` scenarios are kept in
    process memory.
    """

    store_root: Path | None = None
    horizontal_spacing: float = DEFAULT_HORIZONTAL_SPACING
    level_spacing: float = DEFAULT_LEVEL_SPACING
    max_depth: int = DEFAULT_MAX_DEPTH
    fallback_to_first_scene: bool = False

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None
    ) -> "SceneGraphApiSettings":
        """Return settings populated from ``environ``.

        Args:
            environ: Optional mapping of environment variables. When omitted,
                :data:`os.environ` is used.
        """

        source = environ if environ is not None else os.environ

        return cls(
            store_root=_normalise_path(source.get("SCENEGRAPH_STORE_ROOT")),
            horizontal_spacing=_parse_positive_float(
                source.get("SCENEGRAPH_HORIZONTAL_SPACING"),
                name="SCENEGRAPH_HORIZONTAL_SPACING",
                default=DEFAULT_HORIZONTAL_SPACING,
            ),
            level_spacing=_parse_positive_float(
                source.get("SCENEGRAPH_LEVEL_SPACING"),
                name="SCENEGRAPH_LEVEL_SPACING",
                default=DEFAULT_LEVEL_SPACING,
            ),
            max_depth=_parse_positive_int(
                source.get("SCENEGRAPH_MAX_DEPTH"),
                name="SCENEGRAPH_MAX_DEPTH",
                default=DEFAULT_MAX_DEPTH,
            ),
            fallback_to_first_scene=_parse_bool(
                source.get("SCENEGRAPH_FALLBACK_ROOT"),
                name="SCENEGRAPH_FALLBACK_ROOT",
                default=False,
            ),
        )

    def layout_settings(self) -> LayoutSettings:
        return LayoutSettings(
            horizontal_spacing=self.horizontal_spacing,
            level_spacing=self.level_spacing,
            max_depth=self.max_depth,
            fallback_to_first_scene=self.fallback_to_first_scene,
        )


__all__ = ["SceneGraphApiSettings"]
