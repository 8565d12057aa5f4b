"""Cluster client factory for centralized backend creation."""

from typing import Callable, List, Optional, Tuple, Type

from ..base import BaseClusterAdminClient
from ..config import ClusterConfig


BackendLoader = Callable[[], Type[BaseClusterAdminClient]]


class ClusterClientFactory:
    """Factory for creating cluster admin clients from an ordered registry.

    Lookups scan registrations in insertion order and the first match wins,
    so re-registering a name never shadows the first entry.
    """

    _backends: List[Tuple[str, BackendLoader]] = []

    @classmethod
    def register(cls, name: str, backend_loader: BackendLoader) -> None:
        """Register a cluster client backend.

        Args:
            name: Backend name, matched against ``ClusterConfig.backend``
            backend_loader: Function that returns the client class
        """
        if not name:
            raise ValueError("Backend name must not be empty")
        cls._backends.append((name, backend_loader))

    @classmethod
    def available(cls) -> List[str]:
        """Registered backend names, in registration order."""
        names: List[str] = []
        for name, _ in cls._backends:
            if name not in names:
                names.append(name)
        return names

    @classmethod
    def _lookup(cls, name: str) -> Optional[BackendLoader]:
        for registered, loader in cls._backends:
            if registered == name:
                return loader
        return None

    @classmethod
    def create(cls, config: ClusterConfig, **kwargs) -> BaseClusterAdminClient:
        """Create a client for the configured backend.

        Args:
            config: Cluster configuration; ``config.backend`` selects the client
            **kwargs: Additional backend-specific parameters

        Returns:
            Client instance, owned by the caller

        Raises:
            ValueError: If backend not registered
        """
        loader = cls._lookup(config.backend)
        if loader is None:
            # Try to register backends if not already done
            _register_backends()
            loader = cls._lookup(config.backend)
            if loader is None:
                raise ValueError(f"Unknown cluster backend: {config.backend}. Available: {cls.available()}")

        backend_class = loader()
        return backend_class(config, **kwargs)


def _get_solr_cloud_client():
    """Lazy loader for the SolrCloud client."""
    from .solr_cloud import SolrCloudAdminClient
    return SolrCloudAdminClient


def _get_memory_client():
    """Lazy loader for the in-memory client."""
    from .memory import InMemoryClusterAdminClient
    return InMemoryClusterAdminClient


def _register_backends():
    """Register built-in backends with lazy loaders. Called when factory is first used."""
    registered = ClusterClientFactory.available()
    if "solrcloud" not in registered:
        ClusterClientFactory.register("solrcloud", _get_solr_cloud_client)
    if "memory" not in registered:
        ClusterClientFactory.register("memory", _get_memory_client)
