"""
API package - HTTP cross-cutting concerns.

This package provides:
- Global middleware (request_id, error_envelope, fetch_timing, request_logging)
"""
