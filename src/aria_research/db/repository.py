"""Simulation archive repository."""

from __future__ import annotations

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from aria_research.db.models import SimulationORM
from aria_research.models.research import ResearchResult

logger = structlog.get_logger()


def _orm_to_result(orm: SimulationORM) -> ResearchResult:
    """Convert SimulationORM back to the ResearchResult it was saved from."""
    return ResearchResult.model_validate(orm.payload)


class SimulationRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def save(self, result: ResearchResult) -> str:
        """Persist a research result. Returns its simulation_id."""
        async with self.session_factory() as session:
            orm = SimulationORM(
                simulation_id=result.id,
                decision=result.decision,
                tags=list(result.tags),
                payload=result.model_dump(mode="json"),
                created_at=result.created_at,
            )
            session.add(orm)
            await session.flush()
            await session.commit()
            logger.info("simulation_saved", simulation_id=result.id)
            return result.id

    async def list_recent(self, limit: int = 20) -> list[ResearchResult]:
        """Most recent simulations, newest first."""
        async with self.session_factory() as session:
            stmt = (
                select(SimulationORM)
                .order_by(SimulationORM.created_at.desc())
                .limit(limit)
            )
            result = await session.execute(stmt)
            return [_orm_to_result(s) for s in result.scalars().all()]

    async def get(self, simulation_id: str) -> ResearchResult | None:
        async with self.session_factory() as session:
            stmt = select(SimulationORM).where(SimulationORM.simulation_id == simulation_id)
            result = await session.execute(stmt)
            orm = result.scalar_one_or_none()
            return _orm_to_result(orm) if orm is not None else None

    async def delete(self, simulation_id: str) -> bool:
        """Delete by simulation_id. Returns False when nothing matched."""
        async with self.session_factory() as session:
            stmt = delete(SimulationORM).where(SimulationORM.simulation_id == simulation_id)
            result = await session.execute(stmt)
            await session.commit()
            deleted = (result.rowcount or 0) > 0
            logger.info("simulation_deleted", simulation_id=simulation_id, deleted=deleted)
            return deleted
