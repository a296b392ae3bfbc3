# Routes package init
"""
Dropnote Backend — Route Handlers Package
===========================================

Route Inventory:
    - pages.py:     GET /, GET /styleguide, and the not-found fallback
    - messages.py:  POST /, GET /{token}/, DELETE /{token}/
    - table.py:     declare_routes(), the ordered table fed to build_router()

Handlers are thin: they read the request, call a collaborator when there is
one, and build the response. Matching, slash redirects, static files and
access logging belong to dropnote.routing.
"""
