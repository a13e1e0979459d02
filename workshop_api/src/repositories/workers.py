from __future__ import annotations

from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.workforce import Worker
from .base import BaseRepository


class WorkerRepository(BaseRepository):
    """Repository for workers and their cumulative workload counters."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get_worker(self, worker_id: int) -> Optional[Worker]:
        stmt = select(Worker).where(Worker.id == worker_id)
        return await self.scalar_one_or_none(stmt)

    async def find_by_name(self, name: str) -> Optional[Worker]:
        stmt = select(Worker).where(Worker.name == name).order_by(Worker.id).limit(1)
        return await self.scalar_one_or_none(stmt)

    async def create_worker(self, name: str) -> Worker:
        row = Worker(name=name, total_jobs=0, total_services=0)
        await self.add(row)
        await self.flush()
        return row

    async def increment_stats(self, worker_id: int, jobs: int, services: int) -> None:
        """Apply a signed increment to both counters in a single UPDATE."""
        stmt = (
            update(Worker)
            .where(Worker.id == worker_id)
            .values(
                total_jobs=Worker.total_jobs + jobs,
                total_services=Worker.total_services + services,
            )
            .execution_options(synchronize_session="fetch")
        )
        await self.execute(stmt)
