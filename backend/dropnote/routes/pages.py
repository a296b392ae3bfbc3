"""
Dropnote Backend — Page Handlers
==================================

What:  Landing page, style reference and the not-found fallback.
How:   Plain async handlers returning fixed markup; no template engine.
Who:   Bound to routes in dropnote.routes.table; not_found is the router's
       default handler and is also reused by the show-message action.
"""

import html
import logging
from typing import Dict, Tuple

from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from starlette.requests import Request
from starlette.responses import Response

from dropnote.schemas.message import NotFoundResponse

logger = logging.getLogger(__name__)

# Self-destruct delays offered on the landing page, keyed by minutes.
DELAYS: Dict[str, str] = {
    "15": "15min",
    "30": "30min",
    "60": "1h",
    "120": "2h",
    "1440": "24h",
}
DEFAULT_DELAY = "15"

_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<link rel="stylesheet" href="/static/css/main.css">
</head>
<body>
{body}
</body>
</html>
"""


def render_page(title: str, body: str) -> str:
    """Wrap a body fragment in the shared page shell. `title` is escaped."""
    return _PAGE.format(title=html.escape(title), body=body)


async def index(request: Request) -> Response:
    """GET /: message form with the delay choices."""
    options = "\n".join(
        '<option value="{value}"{selected}>{label}</option>'.format(
            value=value,
            label=html.escape(label),
            selected=" selected" if value == DEFAULT_DELAY else "",
        )
        for value, label in DELAYS.items()
    )
    body = (
        "<h1>Dropnote</h1>\n"
        '<form method="post" action="/">\n'
        '<textarea name="message" required></textarea>\n'
        f'<select name="delay">\n{options}\n</select>\n'
        '<button type="submit">Create message</button>\n'
        "</form>"
    )
    return HTMLResponse(render_page("Dropnote", body))


async def styleguide(request: Request) -> Response:
    """GET /styleguide: reference sheet of the site's basic elements."""
    body = (
        "<h1>Heading 1</h1>\n<h2>Heading 2</h2>\n<h3>Heading 3</h3>\n"
        "<p>Paragraph with <a href=\"/\">a link</a>, <strong>bold</strong> "
        "and <em>emphasis</em>.</p>\n"
        "<ul><li>List item</li><li>List item</li></ul>\n"
        "<pre><code>preformatted text</code></pre>\n"
        '<button type="button">Button</button>'
    )
    return HTMLResponse(render_page("Styleguide", body))


# ══════════════════════════════════════════════════════════════════════════
# Not Found
# ══════════════════════════════════════════════════════════════════════════

# Offered formats in server order; used only when the client's Accept header
# ranks two of them exactly the same.
_FORMATS: Tuple[Tuple[str, str], ...] = (
    ("html", "text/html"),
    ("json", "application/json"),
    ("text", "text/plain"),
)

Preference = Tuple[float, int, int]


def _parse_accept(header: str) -> Tuple[Tuple[str, float], ...]:
    ranges = []
    for part in header.split(","):
        media, _, params = part.strip().partition(";")
        media = media.strip().lower()
        if not media:
            continue
        quality = 1.0
        for param in params.split(";"):
            key, _, value = param.strip().partition("=")
            if key.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        ranges.append((media, quality))
    return tuple(ranges)


def _preference(media_type: str, ranges: Tuple[Tuple[str, float], ...]) -> Preference:
    """
    Rank `media_type` by the most specific range that matches it.

    Returns (quality, specificity, -position) so larger is better: higher
    quality first, then an exact type over a wildcard, then whichever the
    client listed first.
    """
    main = media_type.partition("/")[0]
    best: Preference = (0.0, -1, 0)
    for position, (media, quality) in enumerate(ranges):
        r_main, _, r_sub = media.partition("/")
        if media == media_type:
            specificity = 2
        elif r_main == main and r_sub == "*":
            specificity = 1
        elif media == "*/*":
            specificity = 0
        else:
            continue
        if specificity > best[1]:
            best = (quality, specificity, -position)
    return best


def negotiate_format(accept: str) -> str:
    """
    Pick "html", "json" or "text" for an Accept header.

    A missing header counts as */* (html). When nothing offered is
    acceptable, plain text is used.
    """
    ranges = _parse_accept(accept or "*/*")
    best, best_rank = "text", None
    for name, media_type in _FORMATS:
        rank = _preference(media_type, ranges)
        if rank[0] <= 0:
            continue
        if best_rank is None or rank > best_rank:
            best, best_rank = name, rank
    return best


async def not_found(request: Request) -> Response:
    """Fallback for requests no route claims. Always 404."""
    fmt = negotiate_format(request.headers.get("accept", ""))
    logger.debug("Not found: %s %s (%s)", request.method, request.url.path, fmt)

    if fmt == "html":
        body = (
            "<h1>Not found</h1>\n"
            "<p>This message does not exist, has expired, or was already read.</p>\n"
            '<p><a href="/">Write a new message</a></p>'
        )
        return HTMLResponse(render_page("Not found", body), status_code=404)
    if fmt == "json":
        return JSONResponse(NotFoundResponse().model_dump(), status_code=404)
    return PlainTextResponse("Not found", status_code=404)
