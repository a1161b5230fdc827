"""
Poker circuit main entry point
"""
import asyncio
import sys
from pathlib import Path

from loguru import logger

from app.config import server_config
from app.errors import CircuitError
from ranking.aggregator import export_ranking, print_ranking_summary


def setup_logging():
    """stderr sink plus a daily rotated file"""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=server_config.log_level
    )
    logger.add(
        str(Path(server_config.log_dir) / "circuit_{time:YYYY-MM-DD}.log"),
        rotation="1 day",
        retention="30 days",
        level="DEBUG"
    )


def serve():
    import uvicorn

    logger.info(f"API server starting on {server_config.host}:{server_config.port}")
    uvicorn.run("app.server:app", host=server_config.host, port=server_config.port)


async def run_command(args) -> int:
    from app.service import CircuitService

    service = CircuitService()

    if args.mode == "migrate":
        from database.run_migration import run_migration
        return 0 if run_migration(service.db.client) else 1

    if args.mode == "stats":
        stats = await service.db.get_stats()
        print("\n=== Database stats ===")
        for table, count in stats.items():
            print(f"  {table}: {count}")
        return 0

    if args.tournament is None:
        logger.error("--tournament is required for this mode")
        return 2

    rankings = await service.compute_ranking(args.tournament)
    tournament = await service.db.get_tournament(args.tournament)

    if args.mode == "ranking":
        print_ranking_summary(rankings, title=f"Ranking - {tournament['name']}", top_n=args.top)
    elif args.mode == "export":
        output = args.output or f"ranking_{args.tournament}.json"
        export_ranking(tournament, rankings, output)

    return 0


def main():
    """Main function"""
    import argparse

    parser = argparse.ArgumentParser(description="Poker circuit scoring service")
    parser.add_argument(
        "--mode",
        choices=["serve", "ranking", "export", "stats", "migrate"],
        default="serve",
        help="Run mode"
    )
    parser.add_argument("--tournament", type=int, help="Tournament id (ranking/export)")
    parser.add_argument("--output", type=str, help="Output JSON file (export)")
    parser.add_argument("--top", type=int, default=20, help="Rows to print (ranking)")

    args = parser.parse_args()
    setup_logging()

    if args.mode == "serve":
        serve()
        return

    try:
        code = asyncio.run(run_command(args))
    except CircuitError as e:
        logger.error(str(e))
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
