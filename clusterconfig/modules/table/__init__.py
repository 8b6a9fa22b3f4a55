"""
Table Module - Black Box Interface

Purpose: Serve configuration documents as rows of `rethinkdb.cluster_config`
Interface: get_primary_key_name(), read_all_primary_keys(), read_row(), write_row()
Hidden: Document registry, structural row checks

The row set is fixed at construction; documents handle their own fields.
"""

from .table import DELETE_ERROR, INSERT_ERROR, PRIMARY_KEY, TABLE_NAME, ConfigTable

__all__ = ["ConfigTable", "TABLE_NAME", "PRIMARY_KEY", "DELETE_ERROR", "INSERT_ERROR"]
