"""
Metadata Module - Black Box Interface

Purpose: Access to replicated cluster metadata
Interface: SharedMetadataView (get(), join(), home_loop), run_on_home()
Hidden: Merge rules, home thread management

Any store that can hand out snapshots and join them back can stand in for
the in-memory view without affecting other modules.
"""

from .context import HomeContext, run_on_home
from .metadata import MAX_SECRET_LENGTH, AuthKey, AuthMetadata, Versioned
from .view import InMemoryMetadataView, SharedMetadataView

__all__ = [
    "MAX_SECRET_LENGTH",
    "AuthKey",
    "AuthMetadata",
    "Versioned",
    "SharedMetadataView",
    "InMemoryMetadataView",
    "HomeContext",
    "run_on_home",
]
