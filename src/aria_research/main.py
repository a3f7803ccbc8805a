"""Entry point: run one decision research from the command line."""

import argparse
import asyncio
import json
import sys
from typing import get_args

import structlog

from aria_research.config import Settings
from aria_research.db.engine import create_db_engine, create_session_factory
from aria_research.db.repository import SimulationRepository
from aria_research.gemini_client import GeminiClient
from aria_research.models.research import DecisionType
from aria_research.research_service import ResearchService

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aria-research", description=__doc__)
    parser.add_argument("decision", nargs="?", help="The decision to research")
    parser.add_argument(
        "--tag",
        dest="tags",
        action="append",
        choices=get_args(DecisionType),
        default=[],
        help="Decision category (repeatable)",
    )
    parser.add_argument("--refine", action="store_true", help="Only suggest clearer rewordings")
    parser.add_argument("--no-save", action="store_true", help="Do not archive the result")
    parser.add_argument("--history", action="store_true", help="List recently archived simulations")
    return parser


async def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.history and not args.decision:
        parser.error("a decision is required unless --history is given")

    settings = Settings()
    client = GeminiClient(settings)

    if args.refine:
        service = ResearchService(client=client)
        print(json.dumps(await service.refine(args.decision), indent=2))
        return 0

    engine = None
    archive = None
    if args.history or (settings.ARCHIVE_ENABLED and not args.no_save):
        engine = create_db_engine(settings)
        archive = SimulationRepository(create_session_factory(engine))

    try:
        if args.history:
            for record in await archive.list_recent(limit=settings.ARCHIVE_LIST_LIMIT):
                print(f"{record.created_at.isoformat()}  {record.id}  {record.decision}")
            return 0

        service = ResearchService(client=client, archive=archive)
        result = await service.research(args.decision, args.tags)
        print(result.model_dump_json(indent=2))
    finally:
        if engine is not None:
            await engine.dispose()
            logger.info("shutdown_complete")
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
