import logging
import threading
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..documents import AuthDocument, Document
from ..metadata import SharedMetadataView

logger = logging.getLogger(__name__)

TABLE_NAME = "rethinkdb.cluster_config"
PRIMARY_KEY = "id"

DELETE_ERROR = f"It's illegal to delete rows from the `{TABLE_NAME}` table."
INSERT_ERROR = f"It's illegal to insert new rows into the `{TABLE_NAME}` table."


class ConfigTable:
    """
    Backend for the `rethinkdb.cluster_config` table.

    The set of rows is fixed when the table is built. Rows can be read and
    overwritten, never inserted or deleted; each document validates its own
    fields.
    """

    def __init__(self, documents: Mapping[str, Document]):
        """
        Initialize the table.

        Args:
            documents: Mapping of primary key to document handler
        """
        self.documents: Mapping[str, Document] = MappingProxyType(dict(documents))

    @classmethod
    def build(cls, view: SharedMetadataView, audit_log=None) -> "ConfigTable":
        """
        Wire the standard documents to a shared metadata view.

        Args:
            view: Shared view of the auth metadata
            audit_log: Optional AuditLog for applied writes

        Returns:
            ConfigTable serving the `auth` document
        """
        return cls({"auth": AuthDocument(view, audit_log=audit_log)})

    def get_primary_key_name(self) -> str:
        return PRIMARY_KEY

    async def read_all_primary_keys(
        self, interruptor: Optional[threading.Event] = None
    ) -> List[str]:
        return sorted(self.documents)

    async def read_row(
        self, primary_key: Any, interruptor: Optional[threading.Event] = None
    ) -> Optional[dict]:
        """
        Read one row.

        Args:
            primary_key: Row key; anything but a known string misses
            interruptor: Optional event that aborts the read

        Returns:
            Row object, or None if there is no such row
        """
        document = self._find(primary_key)
        if document is None:
            logger.debug(f"No row {primary_key!r} in {TABLE_NAME}")
            return None
        return await document.read(interruptor)

    async def read_all_rows(
        self, interruptor: Optional[threading.Event] = None
    ) -> List[dict]:
        """Read every row, ordered by primary key."""
        rows = []
        for key in await self.read_all_primary_keys(interruptor):
            rows.append(await self.documents[key].read(interruptor))
        return rows

    async def write_row(
        self,
        primary_key: Any,
        new_value: Optional[Dict[str, Any]],
        interruptor: Optional[threading.Event] = None,
    ) -> Tuple[bool, Optional[str]]:
        """
        Overwrite one row.

        Args:
            primary_key: Key of an existing row
            new_value: New row object, or None to delete
            interruptor: Optional event that aborts the write

        Returns:
            Tuple of (success, error_message or None)
        """
        if new_value is None:
            logger.info(f"Rejected delete of {primary_key!r} from {TABLE_NAME}")
            return False, DELETE_ERROR

        document = self._find(primary_key)
        if document is None:
            logger.info(f"Rejected insert of {primary_key!r} into {TABLE_NAME}")
            return False, INSERT_ERROR

        ok, error = await document.write(new_value, interruptor)
        if not ok:
            logger.info(f"Rejected write to {primary_key!r} in {TABLE_NAME}: {error}")
        return ok, error

    def _find(self, primary_key: Any) -> Optional[Document]:
        if not isinstance(primary_key, str):
            return None
        return self.documents.get(primary_key)
