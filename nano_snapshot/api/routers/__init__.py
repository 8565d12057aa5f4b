"""API routers."""

from . import backup, health, jobs, restore

__all__ = ["backup", "health", "jobs", "restore"]
