"""
Dropnote Backend — Abstract Message Backend Interface
=======================================================

What:  Abstract base class for whatever stores and hands out messages.
How:   Concrete implementations inherit from MessageBackend and implement
       create_message(), fetch_message() and delete_message().
Who:   Called by MessageActions (dropnote.routes.messages).

The package ships no implementation. Storage, token generation, expiry and
per-client access rules all live behind this interface.
"""

from abc import ABC, abstractmethod
from typing import Optional


class MessageBackend(ABC):
    """
    Abstract interface for disposable message storage.

    Contract:
        - create_message() receives the raw request body; parsing it is the
          backend's job
        - tokens are opaque strings that fit in a single URL path segment
        - `client` identifies the requester (the remote host) so the backend
          can bind a message to whoever opened it first
        - storage failures are raised as DropnoteError (or a subclass); the
          app answers them with a 500 JSON error body
    """

    @abstractmethod
    async def create_message(self, body: bytes, content_type: str) -> str:
        """
        Store a new message and return its token.

        Args:
            body:         Raw request body as sent by the client.
            content_type: The request's Content-Type header ("" if absent).

        Returns:
            str: Token addressing the message at /{token}/.
        """
        ...

    @abstractmethod
    async def fetch_message(self, token: str, client: str) -> Optional[str]:
        """
        Return the message text for `token`, or None when it is unknown,
        expired, or not readable by `client`.
        """
        ...

    @abstractmethod
    async def delete_message(self, token: str, client: str) -> bool:
        """Delete the message; True if something was removed."""
        ...
