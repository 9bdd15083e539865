"""
Middleware package for the application.
"""

from dailyfocus.middleware.metrics import MetricsMiddleware
from dailyfocus.middleware.request_id import RequestIDMiddleware

__all__ = [
    "MetricsMiddleware",
    "RequestIDMiddleware",
]
