"""Shared service-layer building blocks: base class, errors and ports."""
