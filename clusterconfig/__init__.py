"""
clusterconfig - Cluster Configuration Table

Exposes cluster-wide security configuration documents as rows of the
virtual `rethinkdb.cluster_config` table.

Architecture:
- Each module is self-contained with clear interfaces
- The table never owns the replicated metadata, it only reads and joins
  through a shared view bound to a single home context
- All communication through defined interfaces

Modules:
- metadata: Shared metadata view, versioned values, home context handoff
- documents: Document handlers (auth) and secret conversion
- table: The cluster_config table backend
- storage: Redis connection and audit trail
- access: API key verification for the HTTP surface
- api: Response models
"""

__version__ = "1.0.0"
