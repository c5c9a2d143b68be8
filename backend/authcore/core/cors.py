"""CORS policy for the auth API."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from authcore.core.logger import REQUEST_ID_HEADER


def init_app(app: Flask) -> None:
    """Allow browser clients from ``CORS_ORIGINS`` to call ``/api/*``.

    A blank value or ``"*"`` opens the API to any origin but then credentials
    (cookies, ``Authorization`` forwarding by the browser) are not allowed.
    The correlation header is exposed so front-ends can report it.
    """
    raw_origins = app.config.get("CORS_ORIGINS", "")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    wildcard = not origins or origins == ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if wildcard else origins}},
        supports_credentials=not wildcard,
        expose_headers=[REQUEST_ID_HEADER],
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
