"""
Protocol definitions for the frame engine's collaborators.

The engine never talks to IPFS or an image library directly; it goes through
these two capabilities so deployments and tests can swap them.
"""

from typing import Protocol, Set

from breadcast.engine.page_builder import PageDescription


class Renderer(Protocol):
    """
    Protocol for turning a page description into image bytes.

    Implementations are synchronous and CPU bound; the engine runs them in a
    worker thread.
    """

    media_type: str
    extension: str

    def render(self, page: PageDescription) -> bytes:
        """
        Render a single frame image.

        Args:
            page: The renderer-agnostic page description.

        Returns:
            Encoded image bytes of type `media_type`.
        """
        ...


class ObjectStore(Protocol):
    """
    Protocol for a content-addressed blob store.

    Identifiers are content derived, so putting the same bytes twice yields
    the same identifier.
    """

    async def put(self, name: str, data: bytes) -> str:
        """Store `data` under a human-readable `name`, returning its content id."""
        ...

    async def get(self, content_id: str) -> bytes:
        """Fetch the bytes of a content id."""
        ...

    async def list(self) -> Set[str]:
        """Return every content id currently held."""
        ...

    async def delete(self, content_id: str) -> None:
        """Release a content id."""
        ...

    def url(self, content_id: str) -> str:
        """Public URL for a content id."""
        ...
