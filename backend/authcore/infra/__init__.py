"""Concrete adapters for the service-layer ports (JWT, crypto, Redis, SQL)."""
