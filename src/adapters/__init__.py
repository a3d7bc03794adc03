"""Adapters: concrete I/O (HTTP API client, JSON export)."""
