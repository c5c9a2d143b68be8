"""Reverse-proxy header handling."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Wrap the WSGI app in :class:`~werkzeug.middleware.proxy_fix.ProxyFix`.

    Rejected logins are logged with the client address, so
    ``X-Forwarded-For`` must be trusted for exactly the number of proxies in
    front of the service
    (``PROXY_HOPS``, default 1). Set ``USE_PROXYFIX=False`` when the service
    is exposed directly.
    """
    if not app.config.get("USE_PROXYFIX", True):
        return
    hops = int(app.config.get("PROXY_HOPS", 1))
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops)
