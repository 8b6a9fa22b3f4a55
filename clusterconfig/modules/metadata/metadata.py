import time
from dataclasses import dataclass, field, replace
from typing import Generic, Optional, TypeVar

# Auth keys longer than this are rejected on write
MAX_SECRET_LENGTH = 2048

T = TypeVar("T")


def _now_us() -> int:
    return time.time_ns() // 1000


@dataclass(frozen=True)
class AuthKey:
    """
    Shared secret used for client authentication.

    An empty key means no secret is configured. The value is deliberately
    kept out of ``repr()`` so a key never ends up in a log line.
    """

    value: bytes = field(default=b"", repr=False)

    @classmethod
    def from_string(cls, text: str) -> Optional["AuthKey"]:
        """
        Build a key from a string.

        Returns:
            AuthKey, or None if the encoded key exceeds MAX_SECRET_LENGTH
        """
        encoded = text.encode("utf-8")
        if len(encoded) > MAX_SECRET_LENGTH:
            return None
        return cls(encoded)

    @property
    def is_set(self) -> bool:
        return bool(self.value)

    def __len__(self) -> int:
        return len(self.value)

    def __repr__(self) -> str:
        return f"AuthKey(is_set={self.is_set})"


@dataclass(frozen=True)
class Versioned(Generic[T]):
    """
    Value tagged with the time it was written.

    Joining two versions keeps the later one; on a tie the current value wins,
    so joining a version with itself is a no-op.
    """

    value: T
    timestamp: int = 0

    def set(self, value: T) -> "Versioned[T]":
        """Return a new version that is strictly later than this one."""
        return Versioned(value, max(_now_us(), self.timestamp + 1))

    def join(self, other: "Versioned[T]") -> "Versioned[T]":
        if other.timestamp > self.timestamp:
            return other
        return self


@dataclass(frozen=True)
class AuthMetadata:
    """Snapshot of the cluster's auth metadata."""

    auth_key: Versioned[AuthKey] = field(default_factory=lambda: Versioned(AuthKey()))

    def with_auth_key(self, key: AuthKey) -> "AuthMetadata":
        return replace(self, auth_key=self.auth_key.set(key))

    def join(self, other: "AuthMetadata") -> "AuthMetadata":
        return AuthMetadata(auth_key=self.auth_key.join(other.auth_key))
