from time import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from dailyfocus.core.logging import get_logger
from dailyfocus.core.metrics import track_http_request


logger = get_logger(__name__)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time()

        method = request.method
        request_id = getattr(request.state, "request_id", None)

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time() - start_time
            path = self._get_endpoint_path(request)
            track_http_request(method=method, endpoint=path, status=500, duration=duration)
            logger.error(
                "request_failed",
                method=method,
                path=path,
                duration=duration,
                request_id=request_id,
                exc_info=e,
            )
            raise

        duration = time() - start_time
        path = self._get_endpoint_path(request)
        track_http_request(method=method, endpoint=path, status=response.status_code, duration=duration)
        logger.debug(
            "request_completed",
            method=method,
            path=path,
            status=response.status_code,
            duration=duration,
            request_id=request_id,
        )
        return response

    def _get_endpoint_path(self, request: Request) -> str:
        # Route templates keep label cardinality bounded for /favorites/{exercise_id}
        route = request.scope.get("route")
        if route and hasattr(route, "path"):
            return route.path
        return request.url.path
