"""
Documents Module - Black Box Interface

Purpose: Translate configuration documents to and from table rows
Interface: Document.read(), Document.write()
Hidden: Secret redaction, field validation, metadata handoff

New documents only need to implement the Document protocol.
"""

from .auth_document import AuthDocument
from .interfaces import Document
from .secret import (
    convert_auth_key_from_value,
    convert_auth_key_to_value,
    is_hidden_auth_key,
    make_hidden_auth_key,
)

__all__ = [
    "Document",
    "AuthDocument",
    "make_hidden_auth_key",
    "is_hidden_auth_key",
    "convert_auth_key_to_value",
    "convert_auth_key_from_value",
]
