"""Shared views over the replicated auth metadata."""

import asyncio
import logging
from typing import Optional, Protocol

from ..errors import ContractViolation
from .metadata import AuthMetadata

logger = logging.getLogger(__name__)


class SharedMetadataView(Protocol):
    """
    Protocol for a view onto replicated metadata.

    ``get`` and ``join`` may only be called from the thread running
    ``home_loop``. Conflict resolution is owned by the store behind the view.
    """

    @property
    def home_loop(self) -> asyncio.AbstractEventLoop:
        """Event loop that owns all access to the view."""
        ...

    def get(self) -> AuthMetadata:
        """Return the current snapshot."""
        ...

    def join(self, metadata: AuthMetadata) -> None:
        """Merge a snapshot into the replicated state."""
        ...


class InMemoryMetadataView:
    """
    Process-local view joined with AuthMetadata.join.

    Every access is checked against the home loop's thread; a call from any
    other thread is a ContractViolation rather than a silent data race.
    """

    def __init__(
        self,
        home_loop: asyncio.AbstractEventLoop,
        initial: Optional[AuthMetadata] = None,
    ):
        """
        Initialize the view.

        Args:
            home_loop: Event loop whose thread owns the view
            initial: Starting snapshot (no auth key when omitted)
        """
        self._home_loop = home_loop
        self._metadata = initial or AuthMetadata()

    @property
    def home_loop(self) -> asyncio.AbstractEventLoop:
        return self._home_loop

    def get(self) -> AuthMetadata:
        self._assert_home_thread()
        return self._metadata

    def join(self, metadata: AuthMetadata) -> None:
        self._assert_home_thread()
        self._metadata = self._metadata.join(metadata)

    def _assert_home_thread(self) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._home_loop:
            return

        logger.critical("Shared metadata view accessed outside its home context")
        raise ContractViolation("Shared metadata view accessed outside its home context")
