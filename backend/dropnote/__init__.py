"""
Dropnote Backend — Application Package
========================================

Disposable-message web service.

    ┌─────────────────────────────────────┐
    │     main.py (FastAPI app factory)   │  ← middleware, error handlers
    ├─────────────────────────────────────┤
    │     routing.py (router builder)     │  ← matching, slash redirects,
    │                                     │    static files, access log
    ├─────────────────────────────────────┤
    │     routes/ (handlers + table)      │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     services/ (MessageBackend)      │  ← storage seam, no implementation
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
