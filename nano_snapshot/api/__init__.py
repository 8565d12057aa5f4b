"""HTTP API for nano-snapshot."""
