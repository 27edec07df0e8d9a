"""Core domain package for hauntscope.

Core contains the watch loop, deduplication, and webhook fan-out logic
without any HTTP client or storage-specific code, keeping the business
logic portable.
"""
