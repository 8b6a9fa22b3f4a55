"""
Storage Module - Black Box Interface

Purpose: Redis connection handling and the configuration audit trail
Interface: StorageModule (connect(), disconnect()), AuditLog (record(), recent())
Hidden: Redis specifics, event serialization, trimming

Can be replaced with any storage backend without affecting other modules.
"""

from .audit import AuditLog
from .storage import StorageModule

__all__ = ["StorageModule", "AuditLog"]
