"""
Dropnote Backend — Route Table
================================

What:  The service's declared routes, in match order.
Who:   create_app() builds the table once and passes it to build_router().

    GET     /              Index
    GET     /styleguide    Styleguide
    POST    /              NewMessage
    GET     /{token}/      ShowMessage
    DELETE  /{token}/      DeleteMessage
"""

from dropnote.routes import pages
from dropnote.routes.messages import MessageActions
from dropnote.routing import Route, Routes


def declare_routes(messages: MessageActions) -> Routes:
    """Return the route table with message handlers bound to `messages`."""
    return (
        Route(
            name="Index",
            method="GET",
            pattern="/",
            handler=pages.index,
        ),
        Route(
            name="Styleguide",
            method="GET",
            pattern="/styleguide",
            handler=pages.styleguide,
        ),
        Route(
            name="NewMessage",
            method="POST",
            pattern="/",
            handler=messages.new_message,
        ),
        Route(
            name="ShowMessage",
            method="GET",
            pattern="/{token}/",
            handler=messages.show_message,
        ),
        Route(
            name="DeleteMessage",
            method="DELETE",
            pattern="/{token}/",
            handler=messages.delete_message,
        ),
    )
