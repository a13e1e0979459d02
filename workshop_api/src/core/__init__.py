"""
Core application utilities for settings, logging, errors and FastAPI dependencies.

This package provides:
- Application-level settings (separate from DB settings)
- Structured logging with request correlation ids
- The domain error taxonomy used by services and API handlers
- Dependency helpers (database session per request)
"""
