"""Cross-cutting infrastructure: configuration, logging, errors and extensions."""
