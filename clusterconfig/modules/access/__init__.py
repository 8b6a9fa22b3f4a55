"""
Access Module - Black Box Interface

Purpose: Authenticate callers of the HTTP surface
Interface: verify_api_key()
Hidden: Key formats, comparison

Can be swapped for any other scheme without affecting the table.
"""

from .access import AccessModule

__all__ = ["AccessModule"]
