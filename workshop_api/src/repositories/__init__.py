"""
Repository layer for data access.

Repositories encapsulate SQLAlchemy queries and patterns for each domain area.
They operate on the AsyncSession handed to them and leave transaction
boundaries to the calling service.
"""
