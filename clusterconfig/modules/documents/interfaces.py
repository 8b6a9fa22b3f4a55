"""Document interfaces following Black Box Design principles."""
import threading
from typing import Any, Optional, Protocol, Tuple


class Document(Protocol):
    """Protocol for one fixed row of the cluster_config table."""

    async def read(self, interruptor: Optional[threading.Event] = None) -> dict:
        """
        Produce the row for this document.

        Returns:
            Row object, including the primary key
        """
        ...

    async def write(
        self,
        row: Any,
        interruptor: Optional[threading.Event] = None,
    ) -> Tuple[bool, Optional[str]]:
        """
        Validate a row and apply it.

        Returns:
            Tuple of (success, error_message or None)
        """
        ...
