"""
Response models for the cluster_config HTTP surface.

Rows themselves are free-form objects: their fields are validated by the
table's documents, not by these models.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class ClusterConfigRows(BaseModel):
    """Every row of the table."""

    table: str = Field(..., description="Table name")
    primary_key: str = Field(..., description="Primary key field")
    rows: List[Dict[str, Any]] = Field(default_factory=list)


class WriteResponse(BaseModel):
    """Result of an accepted write."""

    ok: bool = True
    id: str = Field(..., description="Primary key of the written row")


class ErrorResponse(BaseModel):
    """Rejected operation."""

    error: str


class AuditEvents(BaseModel):
    """Recent configuration changes, newest first."""

    events: List[Dict[str, Any]] = Field(default_factory=list)
