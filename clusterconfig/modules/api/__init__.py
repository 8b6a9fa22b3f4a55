"""
API Module - Black Box Interface

Purpose: Models for the HTTP surface of the table
Interface: Pydantic response models
Hidden: Nothing beyond serialization

The API module only describes payloads - the table holds all logic.
"""

from .models import AuditEvents, ClusterConfigRows, ErrorResponse, WriteResponse

__all__ = ["AuditEvents", "ClusterConfigRows", "ErrorResponse", "WriteResponse"]
