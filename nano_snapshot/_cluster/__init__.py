"""Cluster client backends with lazy loading support."""

from typing import TYPE_CHECKING

# Always import factory and registration (lightweight)
from .factory import ClusterClientFactory, _register_backends

# Type checking imports (no runtime cost)
if TYPE_CHECKING:
    from .solr_cloud import SolrCloudAdminClient
    from .memory import InMemoryClusterAdminClient


def __getattr__(name):
    """Lazy import client backends."""
    if name == "SolrCloudAdminClient":
        from .solr_cloud import SolrCloudAdminClient
        return SolrCloudAdminClient
    elif name == "InMemoryClusterAdminClient":
        from .memory import InMemoryClusterAdminClient
        return InMemoryClusterAdminClient
    else:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "ClusterClientFactory",
    "_register_backends",
    "SolrCloudAdminClient",
    "InMemoryClusterAdminClient",
]
