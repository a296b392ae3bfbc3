"""
Dropnote Backend — Router Builder
===================================

What:  Turns a declared route table into an ASGI dispatcher.
How:   Each Route becomes a Starlette route whose endpoint is the handler
       wrapped by log_route(). A static-files mount is placed in front of the
       table and the not-found handler becomes the router's default app.
Who:   Called once by create_app() in dropnote.main (and directly by tests).
When:  At process startup; the returned router is read-only afterwards.

Each entry is tried in table order. For an entry, the request path is
checked first, then the same path with the trailing slash toggled:
    1. Path under the static prefix    → StaticAssets (file server, plain 404)
    2. Method + pattern match           → logged route handler
    3. Same method, other slash form    → redirect to that form
    4. No entry claims the request      → logged not-found handler ("404")

So an earlier route reached through the other slash form wins over a later
pattern that accepts the literal path. A path that matches a pattern under a
different method is a miss, not a 405. HEAD is not implied by GET.
"""

import functools
import logging
import os
import re
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Collection, Iterable, List, Sequence, Tuple

from fastapi.responses import PlainTextResponse
from starlette.datastructures import URL
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.routing import BaseRoute, Match, Mount, Router, request_response
from starlette.routing import Route as StarletteRoute
from starlette.staticfiles import StaticFiles
from starlette.types import Receive, Scope, Send

from dropnote.exceptions import RouteConfigurationError
from dropnote.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("dropnote.access")

Handler = Callable[[Request], Awaitable[Response]]

HTTP_METHODS = frozenset(
    {"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT"}
)
NOT_FOUND_ROUTE_NAME = "404"
DEFAULT_STATIC_PREFIX = "/static/"

_PLACEHOLDER_RE = re.compile(r"\{([^{}]*)\}")


@dataclass(frozen=True)
class Route:
    """A single (method, pattern) → handler binding, tagged with a name for logs."""

    name: str
    method: str
    pattern: str
    handler: Handler


Routes = Tuple[Route, ...]


# ══════════════════════════════════════════════════════════════════════════
# Logging Decorator
# ══════════════════════════════════════════════════════════════════════════

def log_route(handler: Handler, name: str) -> Handler:
    """
    Wrap a handler so every invocation writes one access line tagged with `name`.

    The wrapper passes the request through untouched and returns the
    handler's response as-is. Exceptions from the handler still propagate;
    the access line is written either way.

    Log line: METHOD<TAB>PATH<TAB>NAME<TAB>DURATION [request_id]
    """

    @functools.wraps(handler)
    async def logged(request: Request) -> Response:
        start_time = time.perf_counter()
        try:
            return await handler(request)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            rid = request_id_var.get("")
            access_logger.info(
                "%s\t%s\t%s\t%.1fms [%s]",
                request.method,
                request.url.path,
                name,
                duration_ms,
                rid,
                extra={
                    "route": name,
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": round(duration_ms, 2),
                    "request_id": rid,
                },
            )

    return logged


# ══════════════════════════════════════════════════════════════════════════
# Route Objects
# ══════════════════════════════════════════════════════════════════════════

class MethodRoute(StarletteRoute):
    """
    Starlette route that only matches when the method matches too.

    Starlette reports a path-only match as PARTIAL and answers it with 405.
    Here a method mismatch is a plain miss, so the request falls through to
    the slash-redirect check and then to the not-found handler.

    Starlette also lets every GET route answer HEAD. The method set is
    pinned to exactly what was declared.
    """

    def __init__(
        self, path: str, endpoint: Handler, *, methods: Collection[str], name: str
    ) -> None:
        super().__init__(path, endpoint=endpoint, methods=methods, name=name)
        self.methods = {method.upper() for method in methods}

    def matches(self, scope: Scope) -> Tuple[Match, Scope]:
        match, child_scope = super().matches(scope)
        if match == Match.PARTIAL:
            return Match.NONE, {}
        return match, child_scope


class DispatchRouter(Router):
    """
    Router that settles strict-slash per entry, in table order.

    Starlette's Router only looks at the other slash form after every entry
    has missed the literal path, so `/styleguide/` would land on `/{token}/`.
    Here each MethodRoute is asked about the literal path and then about the
    toggled one before the next entry is tried.
    """

    async def app(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await super().app(scope, receive, send)
            return

        if "router" not in scope:
            scope["router"] = self

        toggled = None
        path = scope["path"]
        if self.redirect_slashes and path != "/":
            toggled = dict(scope)
            toggled["path"] = path.rstrip("/") if path.endswith("/") else path + "/"

        for route in self.routes:
            match, child_scope = route.matches(scope)
            if match == Match.FULL:
                scope["route"] = route
                scope.update(child_scope)
                await route.handle(scope, receive, send)
                return
            if toggled is not None and isinstance(route, MethodRoute):
                match, _ = route.matches(toggled)
                if match == Match.FULL:
                    response = RedirectResponse(url=str(URL(scope=toggled)))
                    await response(scope, receive, send)
                    return

        await self.default(scope, receive, send)


class StaticAssets(StaticFiles):
    """
    StaticFiles that answers its own errors with plain-text responses.

    A missing assets directory is served as an empty one instead of failing
    the first request.
    """

    async def check_config(self) -> None:
        if self.directory is not None and not os.path.isdir(self.directory):
            logger.warning("Assets directory %s does not exist", self.directory)
            return
        await super().check_config()

    async def get_response(self, path: str, scope: Scope) -> Response:
        try:
            return await super().get_response(path, scope)
        except HTTPException as exc:
            return PlainTextResponse(
                str(exc.detail), status_code=exc.status_code, headers=exc.headers
            )


# ══════════════════════════════════════════════════════════════════════════
# Validation
# ══════════════════════════════════════════════════════════════════════════

def validate_pattern(pattern: str) -> Tuple[str, ...]:
    """
    Check a path template and return its placeholder names in order.

    Raises:
        RouteConfigurationError: pattern is not absolute, has unbalanced
            braces, or uses an empty, non-identifier or repeated placeholder.
    """
    if not pattern.startswith("/"):
        raise RouteConfigurationError(
            f"Route pattern '{pattern}' must start with '/'", pattern=pattern
        )

    names = _PLACEHOLDER_RE.findall(pattern)
    leftover = _PLACEHOLDER_RE.sub("", pattern)
    if "{" in leftover or "}" in leftover:
        raise RouteConfigurationError(
            f"Route pattern '{pattern}' has unbalanced braces", pattern=pattern
        )

    seen = set()
    for name in names:
        if not name.isidentifier():
            raise RouteConfigurationError(
                f"Route pattern '{pattern}' has invalid placeholder '{{{name}}}'",
                pattern=pattern,
            )
        if name in seen:
            raise RouteConfigurationError(
                f"Route pattern '{pattern}' repeats placeholder '{{{name}}}'",
                pattern=pattern,
            )
        seen.add(name)
    return tuple(names)


def validate_routes(routes: Iterable[Route]) -> Routes:
    """
    Validate a route table and return it as an immutable tuple.

    Every (method, pattern) pair and every name must be unique. Patterns are
    compared with placeholder names erased, since `/{token}/` and `/{id}/`
    match the same paths. The first problem found raises
    RouteConfigurationError.
    """
    table = tuple(routes)
    claimed = {}
    names = set()

    for route in table:
        if not route.name:
            raise RouteConfigurationError(
                f"Route for {route.method} {route.pattern} has no name",
                pattern=route.pattern,
            )
        if route.method not in HTTP_METHODS:
            raise RouteConfigurationError(
                f"Route '{route.name}' uses unknown method '{route.method}'",
                route=route.name,
            )
        if not callable(route.handler):
            raise RouteConfigurationError(
                f"Route '{route.name}' handler is not callable", route=route.name
            )
        validate_pattern(route.pattern)

        key = (route.method, _PLACEHOLDER_RE.sub("{}", route.pattern))
        if key in claimed:
            raise RouteConfigurationError(
                f"Route '{route.name}' duplicates {route.method} {route.pattern} "
                f"already declared by '{claimed[key]}'",
                route=route.name,
                pattern=route.pattern,
            )
        if route.name in names:
            raise RouteConfigurationError(
                f"Route name '{route.name}' is declared more than once",
                route=route.name,
            )
        claimed[key] = route.name
        names.add(route.name)

    return table


# ══════════════════════════════════════════════════════════════════════════
# Builder
# ══════════════════════════════════════════════════════════════════════════

def build_router(
    routes: Sequence[Route],
    assets_dir: str,
    not_found: Handler,
    static_prefix: str = DEFAULT_STATIC_PREFIX,
) -> Router:
    """
    Build the request dispatcher for a route table.

    Args:
        routes:        Declared routes, matched in order (first match wins).
        assets_dir:    Directory served under `static_prefix`. It is not
                       required to exist at build time.
        not_found:     Handler for requests no route claims; logged as "404".
        static_prefix: Reserved path prefix for static files, e.g. "/static/".

    Returns:
        A DispatchRouter (an ASGI app) with strict-slash redirects enabled.

    Raises:
        RouteConfigurationError: duplicate or malformed routes, or a static
            prefix that is not of the form "/name/".
    """
    table = validate_routes(routes)

    if (
        not static_prefix.startswith("/")
        or not static_prefix.endswith("/")
        or static_prefix == "/"
    ):
        raise RouteConfigurationError(
            f"Static prefix '{static_prefix}' must look like '/name/'",
            pattern=static_prefix,
        )

    entries: List[BaseRoute] = [
        Mount(
            static_prefix.rstrip("/"),
            app=StaticAssets(directory=assets_dir, check_dir=False),
            name="static",
        )
    ]
    for route in table:
        entries.append(
            MethodRoute(
                route.pattern,
                endpoint=log_route(route.handler, route.name),
                methods=[route.method],
                name=route.name,
            )
        )

    logger.debug(
        "Built router with %d routes, static %s -> %s",
        len(table),
        static_prefix,
        assets_dir,
    )

    return DispatchRouter(
        routes=entries,
        redirect_slashes=True,
        default=request_response(log_route(not_found, NOT_FOUND_ROUTE_NAME)),
    )
