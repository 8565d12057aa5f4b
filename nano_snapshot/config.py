"""Configuration management for nano-snapshot."""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ClusterConfig:
    """Cluster administration client configuration.

    Collection layout parameters apply to collections re-created by a restore.
    """
    backend: str = "solrcloud"  # solrcloud, memory
    base_url: str = "http://localhost:8983/solr"
    backup_location: Optional[str] = None  # None: cluster-configured shared location

    # Collection layout
    shard_count: int = 2
    replication_factor: int = 2
    max_shards_per_node: int = 2

    # Transport
    request_timeout: float = 300.0  # sync backups/restores block for the whole operation
    connect_timeout: float = 10.0
    max_retries: int = 3
    username: Optional[str] = None
    password: Optional[str] = None
    verify_ssl: bool = True

    @classmethod
    def from_env(cls) -> 'ClusterConfig':
        """Create config from environment variables."""
        return cls(
            backend=os.getenv("SOLR_BACKEND", "solrcloud"),
            base_url=os.getenv("SOLR_URL", "http://localhost:8983/solr"),
            backup_location=os.getenv("SOLR_BACKUP_LOCATION") or None,
            shard_count=int(os.getenv("SOLR_SHARD_COUNT", "2")),
            replication_factor=int(os.getenv("SOLR_REPLICATION_FACTOR", "2")),
            max_shards_per_node=int(os.getenv("SOLR_MAX_SHARDS_PER_NODE", "2")),
            request_timeout=float(os.getenv("SOLR_REQUEST_TIMEOUT", "300.0")),
            connect_timeout=float(os.getenv("SOLR_CONNECT_TIMEOUT", "10.0")),
            max_retries=int(os.getenv("SOLR_MAX_RETRIES", "3")),
            username=os.getenv("SOLR_USERNAME") or None,
            password=os.getenv("SOLR_PASSWORD") or None,
            verify_ssl=os.getenv("SOLR_VERIFY_SSL", "true").lower() == "true",
        )

    def __post_init__(self):
        """Validate configuration."""
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        if self.shard_count <= 0:
            raise ValueError(f"shard_count must be positive, got {self.shard_count}")
        if self.replication_factor <= 0:
            raise ValueError(f"replication_factor must be positive, got {self.replication_factor}")
        if self.max_shards_per_node <= 0:
            raise ValueError(f"max_shards_per_node must be positive, got {self.max_shards_per_node}")
        if self.request_timeout <= 0:
            raise ValueError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.connect_timeout <= 0:
            raise ValueError(f"connect_timeout must be positive, got {self.connect_timeout}")
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {self.max_retries}")
        if (self.username is None) != (self.password is None):
            raise ValueError("username and password must be set together")

    def to_dict(self) -> dict:
        """Return config as a dict with credentials masked."""
        return {
            "backend": self.backend,
            "base_url": self.base_url,
            "backup_location": self.backup_location,
            "shard_count": self.shard_count,
            "replication_factor": self.replication_factor,
            "max_shards_per_node": self.max_shards_per_node,
            "request_timeout": self.request_timeout,
            "connect_timeout": self.connect_timeout,
            "max_retries": self.max_retries,
            "username": self.username,
            "password": "***" if self.password else None,
            "verify_ssl": self.verify_ssl,
        }


def validate_config(config: ClusterConfig) -> list[str]:
    """Validate configuration and return list of warnings.

    Args:
        config: Cluster configuration to validate

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []

    if config.backend == "solrcloud" and not config.backup_location:
        warnings.append("No backup_location configured; relying on the cluster's default repository location")

    if config.username and config.base_url.startswith("http://"):
        warnings.append("Credentials configured over plain HTTP; consider https for base_url")

    if not config.verify_ssl:
        warnings.append("TLS certificate verification is disabled")

    if config.max_retries > 10:
        warnings.append(f"Very high max_retries ({config.max_retries}) may delay transport failure reporting")

    return warnings
