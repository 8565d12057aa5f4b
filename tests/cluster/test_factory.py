"""Tests for the cluster client factory."""

from unittest.mock import MagicMock

import pytest

from nano_snapshot._cluster.factory import ClusterClientFactory, _register_backends
from nano_snapshot._cluster.memory import InMemoryClusterAdminClient
from nano_snapshot._cluster.solr_cloud import SolrCloudAdminClient
from nano_snapshot.config import ClusterConfig


class TestClusterClientFactory:
    """Test suite for ClusterClientFactory."""

    def setup_method(self):
        """Reset factory state before each test."""
        ClusterClientFactory._backends = []

    def test_register_backend(self):
        loader = MagicMock()
        ClusterClientFactory.register("custom", loader)
        assert ClusterClientFactory.available() == ["custom"]

    def test_register_empty_name(self):
        with pytest.raises(ValueError, match="must not be empty"):
            ClusterClientFactory.register("", MagicMock())

    def test_first_registration_wins(self):
        first, second = MagicMock(), MagicMock()
        ClusterClientFactory.register("custom", first)
        ClusterClientFactory.register("custom", second)

        ClusterClientFactory.create(ClusterConfig(backend="custom"), polls=1)

        first.assert_called_once()
        first.return_value.assert_called_once_with(ClusterConfig(backend="custom"), polls=1)
        second.assert_not_called()
        assert ClusterClientFactory.available() == ["custom"]

    def test_create_registers_builtins_lazily(self):
        client = ClusterClientFactory.create(ClusterConfig(backend="memory"))

        assert isinstance(client, InMemoryClusterAdminClient)
        assert ClusterClientFactory.available() == ["solrcloud", "memory"]

    @pytest.mark.asyncio
    async def test_create_solrcloud(self):
        client = ClusterClientFactory.create(ClusterConfig())
        assert isinstance(client, SolrCloudAdminClient)
        await client.close()

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown cluster backend: cassandra"):
            ClusterClientFactory.create(ClusterConfig(backend="cassandra"))

    def test_register_backends_is_idempotent(self):
        _register_backends()
        _register_backends()
        assert ClusterClientFactory.available() == ["solrcloud", "memory"]
        assert len(ClusterClientFactory._backends) == 2

    def test_registered_backend_preferred_over_builtin(self):
        custom = MagicMock()
        ClusterClientFactory.register("memory", custom)

        ClusterClientFactory.create(ClusterConfig(backend="memory"))

        custom.assert_called_once()
