import logging
import threading
from typing import Any, NoReturn, Optional, Tuple

from ..errors import ContractViolation
from ..metadata import AuthKey, SharedMetadataView, run_on_home
from .secret import convert_auth_key_from_value, convert_auth_key_to_value

logger = logging.getLogger(__name__)


def _contract_violation(message: str) -> NoReturn:
    logger.critical(message)
    raise ContractViolation(message)


class AuthDocument:
    """
    The `auth` row of `rethinkdb.cluster_config`.

    Reads report whether an auth key is configured without revealing it.
    Writes validate the row, then join the new key into the shared metadata
    on the view's home loop.
    """

    name = "auth"
    fields = ("id", "auth_key")

    def __init__(self, view: SharedMetadataView, audit_log=None):
        """
        Initialize the document.

        Args:
            view: Shared view of the auth metadata (not owned by the document)
            audit_log: Optional AuditLog notified after each applied write
        """
        self.view = view
        self.audit_log = audit_log

    async def read(self, interruptor: Optional[threading.Event] = None) -> dict:
        key = await run_on_home(
            self.view.home_loop, lambda: self.view.get().auth_key.value, interruptor
        )
        return {"id": self.name, "auth_key": convert_auth_key_to_value(key)}

    async def write(
        self,
        row: Any,
        interruptor: Optional[threading.Event] = None,
    ) -> Tuple[bool, Optional[str]]:
        """
        Validate and apply a new `auth` row.

        Args:
            row: Row object; the table guarantees it is a dict holding `id`
            interruptor: Optional event that aborts the write before the merge

        Returns:
            Tuple of (success, error_message or None)

        Logic:
        1. Check the guarantees owed by the table (fatal if broken)
        2. Convert `auth_key`
        3. Reject unknown fields
        4. Fetch, update and join the metadata on the home loop
        """
        if not isinstance(row, dict):
            _contract_violation("The table should guarantee input is an object")
        if "id" not in row:
            _contract_violation("The table should guarantee the primary key is present")

        if "auth_key" not in row:
            return False, "Expected a field named `auth_key`."

        auth_key, error = convert_auth_key_from_value(row["auth_key"])
        if error:
            return False, error

        extra_keys = sorted(str(k) for k in row if k not in self.fields)
        if extra_keys:
            listed = ", ".join(f"`{k}`" for k in extra_keys)
            return False, (
                f"Unexpected key(s) {listed} in the `{self.name}` document "
                f"of `rethinkdb.cluster_config`."
            )

        await run_on_home(self.view.home_loop, lambda: self._apply(auth_key), interruptor)
        logger.info(f"Auth key {'set' if auth_key.is_set else 'cleared'}")

        await self._audit(auth_key)
        return True, None

    def _apply(self, auth_key: AuthKey) -> None:
        # Runs on the home loop: fetch, modify and join in one step
        metadata = self.view.get()
        self.view.join(metadata.with_auth_key(auth_key))

    async def _audit(self, auth_key: AuthKey) -> None:
        if self.audit_log is None:
            return
        try:
            await self.audit_log.record(
                "auth_key_updated",
                {"document": self.name, "auth_key_set": auth_key.is_set},
            )
        except Exception as e:
            logger.error(f"Failed to record audit event for `{self.name}`: {e}")
