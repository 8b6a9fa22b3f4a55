import logging
import secrets
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class AccessModule:
    """
    API key check for the HTTP surface.

    Keys are given as ``key`` or ``service:key``; the service part becomes the
    caller's identity.
    """

    def __init__(self, api_keys: List[str]):
        """
        Args:
            api_keys: Entries in ``key`` or ``service:key`` format
        """
        self.api_keys: Dict[str, Optional[str]] = self._parse_api_keys(api_keys)

    @staticmethod
    def _parse_api_keys(entries: List[str]) -> Dict[str, Optional[str]]:
        keys = {}
        for entry in entries:
            entry = entry.strip()
            if not entry:
                continue
            if ":" in entry:
                service, key = entry.split(":", 1)
                keys[key.strip()] = service.strip()
            else:
                keys[entry] = None
        return keys

    def verify_api_key(self, api_key: Optional[str]) -> Tuple[bool, Optional[str]]:
        """
        Verify an API key.

        Args:
            api_key: API key from the X-API-Key header

        Returns:
            Tuple of (is_valid, service_identity)
        """
        if not api_key:
            return False, None

        # Every key is compared, no early exit
        matched = None
        for known_key, identity in self.api_keys.items():
            if secrets.compare_digest(api_key.encode("utf-8"), known_key.encode("utf-8")):
                matched = (True, identity)

        if matched is None:
            logger.warning("Rejected request with unknown API key")
            return False, None
        return matched
