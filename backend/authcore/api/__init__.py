"""HTTP surface: versioned blueprint registries mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def _join(*segments: str) -> str:
    parts = [s.strip("/") for s in segments if s.strip("/")]
    return "/" + "/".join(parts)


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Mount each ``(blueprint, relative_prefix)`` pair under ``base_prefix``.

    An empty relative prefix mounts the blueprint at the version root, e.g.
    ``/api/v1/health``.
    """
    for bp, rel_prefix in entries:
        app.register_blueprint(bp, url_prefix=_join(base_prefix, rel_prefix))


def init_app(app: Flask) -> None:
    """Register every API version on ``app``."""
    from authcore.api import v1

    api_base = app.config.get("API_BASE_PREFIX", "/api")
    for version, registry in ((v1.API_VERSION, v1.REGISTRY),):
        register_blueprint_group(app, base_prefix=_join(api_base, version), entries=registry)


__all__ = ["init_app", "register_blueprint_group"]
