"""Adapters binding the core ports to SQLite, httpx, and config files."""
