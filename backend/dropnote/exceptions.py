"""
Dropnote Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the router and the message actions.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) turn the ones raised
       while serving a request into structured JSON error responses.
Who:   Raised by the router builder and the message actions.

Exception Hierarchy:
    DropnoteError (base)
    ├── RouteConfigurationError  → raised at startup, the process does not serve
    └── BackendUnavailableError  → 503 Service Unavailable
"""

from typing import Any, Dict, Optional


class DropnoteError(Exception):
    """
    Base exception for all Dropnote application errors.

    Attributes:
        message:  Human-readable description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class RouteConfigurationError(DropnoteError):
    """
    Raised when the route table cannot be turned into a router.

    What:    A programming error in the declared routes.
    When:    Duplicate method + pattern, duplicate name, malformed pattern,
             unknown method or a bad static prefix.
    HTTP:    None. It surfaces from create_app() and stops startup.
    """

    def __init__(
        self,
        message: str = "Invalid route configuration",
        route: Optional[str] = None,
        pattern: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if route:
            ctx["route"] = route
        if pattern:
            ctx["pattern"] = pattern
        super().__init__(message=message, context=ctx)
        self.route = route
        self.pattern = pattern


class BackendUnavailableError(DropnoteError):
    """
    Raised when a message action runs without a message backend.

    What:    The application was created without a MessageBackend, so there is
             nothing to create, fetch or delete messages with.
    HTTP:    503 Service Unavailable
    """

    def __init__(
        self,
        message: str = "Message storage is not configured",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
