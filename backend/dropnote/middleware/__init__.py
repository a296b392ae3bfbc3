# Middleware package init
"""
Dropnote Backend — Middleware Package
=======================================

Middleware Chain:
    Request → [Request ID] → [GZip] → dispatcher

    Request ID runs first so the access line written by log_route() and the
    error handlers can include it.
"""
