"""
Request pipeline.

Every request runs through an explicit, ordered list of stages:

    log -> auth (protected routes) -> validate (create/update) -> dispatch

Each stage returns None to continue or an APIError to stop. The pipeline is
the only place that turns errors into responses: typed errors keep their
status code, anything else becomes a 500 with a generic message.
"""

import inspect
import json
import logging
import re
import time
import traceback
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from productapi.auth import API_KEY_HEADER, authorize
from productapi.errors import APIError, InternalError, NotFoundError, UnauthorizedError, ValidationFailedError
from productapi.validation import validate_product

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class PipelineRequest:
    method: str
    path: str
    query: Dict[str, str] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    _json: Any = field(default=_MISSING, init=False, repr=False)

    def __post_init__(self):
        self.method = self.method.upper()
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())

    def json(self) -> Any:
        """Decoded JSON body; an empty body decodes to an empty object."""
        if self._json is _MISSING:
            if not self.body or not self.body.strip():
                self._json = {}
            else:
                try:
                    self._json = json.loads(self.body)
                except (ValueError, UnicodeDecodeError):
                    raise ValidationFailedError("Malformed JSON body")
        return self._json


@dataclass
class PipelineResponse:
    status_code: int
    body: Dict[str, Any]
    content: bytes = b""


def render(body: Dict[str, Any]) -> bytes:
    """Serialize a response body; NaN and infinity are not JSON and raise ValueError."""
    return json.dumps(body, allow_nan=False).encode("utf-8")


@dataclass
class HandlerResult:
    """What a handler hands back on success: the body and its status code."""

    body: Dict[str, Any]
    status_code: int = 200


Handler = Callable[..., Any]


@dataclass
class Route:
    method: str
    path: str
    handler: Handler
    protected: bool = False
    validates: bool = False
    _pattern: Optional[re.Pattern] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        self.method = self.method.upper()
        self._pattern = _compile_path(self.path)

    def match(self, method: str, path: str) -> Optional[Dict[str, str]]:
        if method != self.method:
            return None
        m = self._pattern.match(path)
        return m.groupdict() if m else None


def _compile_path(path: str) -> re.Pattern:
    # /api/products/{id} -> ^/api/products/(?P<id>[^/]+)$
    parts = ["^"]
    for segment in path.strip("/").split("/"):
        if not segment:
            continue
        parts.append("/")
        if segment.startswith("{") and segment.endswith("}"):
            parts.append(f"(?P<{segment[1:-1]}>[^/]+)")
        else:
            parts.append(re.escape(segment))
    if len(parts) == 1:
        parts.append("/")
    parts.append("$")
    return re.compile("".join(parts))


def _normalize_path(path: str) -> str:
    return "/" + path.strip("/") if path.strip("/") else "/"


@dataclass
class RequestContext:
    request: PipelineRequest
    route: Optional[Route] = None
    params: Dict[str, str] = field(default_factory=dict)
    payload: Any = None
    started: float = field(default_factory=time.perf_counter)


Stage = Callable[[RequestContext], Optional[APIError]]


def log_stage(ctx: RequestContext) -> Optional[APIError]:
    req = ctx.request
    logger.info("%s %s", req.method, req.path)
    return None


def make_auth_stage(secret: str) -> Stage:
    def auth_stage(ctx: RequestContext) -> Optional[APIError]:
        if ctx.route is None or not ctx.route.protected:
            return None
        if not authorize(ctx.request.header(API_KEY_HEADER), secret):
            logger.warning("Rejected %s %s: invalid or missing API key", ctx.request.method, ctx.request.path)
            return UnauthorizedError()
        return None

    return auth_stage


def validation_stage(ctx: RequestContext) -> Optional[APIError]:
    if ctx.route is None or not ctx.route.validates:
        return None
    payload = ctx.request.json()
    errors = validate_product(payload)
    if errors:
        logger.info("Validation failed for %s %s: %s", ctx.request.method, ctx.request.path, "; ".join(errors))
        return ValidationFailedError("Validation failed", details=errors)
    ctx.payload = payload
    return None


def route_stage(ctx: RequestContext) -> Optional[APIError]:
    if ctx.route is None:
        return NotFoundError(f"Route {ctx.request.path} not found")
    return None


class Pipeline:
    """
    Ordered stage list plus a route table.

    Routes are matched in registration order, so static paths such as
    /api/products/search must be added before /api/products/{id}.
    """

    def __init__(self, stages: List[Stage], debug: bool = False):
        self.stages = list(stages)
        self.routes: List[Route] = []
        self.debug = debug

    def add_route(self, method: str, path: str, handler: Handler, protected: bool = False, validates: bool = False):
        self.routes.append(Route(method, path, handler, protected=protected, validates=validates))

    def resolve(self, method: str, path: str) -> Tuple[Optional[Route], Dict[str, str]]:
        path = _normalize_path(path)
        for route in self.routes:
            params = route.match(method, path)
            if params is not None:
                return route, params
        return None, {}

    async def handle(self, request: PipelineRequest) -> PipelineResponse:
        ctx = RequestContext(request=request)
        ctx.route, ctx.params = self.resolve(request.method, request.path)
        try:
            for stage in self.stages:
                error = stage(ctx)
                if error is not None:
                    raise error
            result = await self._dispatch(ctx)
            # rendered here so a body that cannot be serialized still ends up as an envelope 500
            response = PipelineResponse(result.status_code, result.body, render(result.body))
        except APIError as e:
            body = e.to_dict()
            response = PipelineResponse(e.status_code, body, render(body))
        except Exception as e:
            logger.exception("Unhandled error on %s %s", request.method, request.path)
            response = self._internal_error(e)
        elapsed_ms = (time.perf_counter() - ctx.started) * 1000
        logger.info("%s %s -> %d (%.1f ms)", request.method, request.path, response.status_code, elapsed_ms)
        return response

    async def _dispatch(self, ctx: RequestContext) -> HandlerResult:
        result = ctx.route.handler(ctx)
        if inspect.isawaitable(result):
            result = await result
        if not isinstance(result, HandlerResult):
            result = HandlerResult(body=result)
        return result

    def _internal_error(self, exc: Exception) -> PipelineResponse:
        body = InternalError().to_dict()
        if self.debug:
            body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return PipelineResponse(500, body, render(body))


def default_stages(secret: str) -> List[Stage]:
    return [log_stage, route_stage, make_auth_stage(secret), validation_stage]
