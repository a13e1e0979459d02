"""
API route modules.

This package contains subrouters for:
- Work orders: list, get, create, update, complete and delete

Routers are included from src.api.main (under the /api/v1 prefix).
"""
