"""Core cross-cutting concerns: logging, errors, metrics."""
