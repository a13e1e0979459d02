"""
Public Pydantic schemas used by FastAPI routes, services, and tests.

Schemas are grouped by domain module (work orders) and also include common
reusable models such as standard message and error responses.
"""

from .common import MessageResponse  # noqa: F401
