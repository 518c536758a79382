"""
Main entry point for Pongbot.

``PongApp`` is the construction and teardown boundary: configuration is read
once, the database is connected, and the service is built with immutable
settings. The ``pongbot`` command runs a single administrative command.
"""

import argparse
import asyncio
import sys
from typing import Optional
import structlog

from .config import Settings, get_config
from .database import (
    ChallengeOps,
    DatabaseManager,
    MemoryChallengeStore,
    MemoryPlayerStore,
    PlayerOps,
)
from .results import Result, render
from .service import PongService
from .utils.logging import command_context, setup_logging

logger = structlog.get_logger(__name__)


class PongApp:
    """Main application class."""

    def __init__(self, config: Optional[Settings] = None, in_memory: bool = False):
        self.config = config or get_config()
        self.in_memory = in_memory
        self.db_manager: Optional[DatabaseManager] = None
        self.service: Optional[PongService] = None

    async def startup(self) -> PongService:
        if self.in_memory:
            players, challenges = MemoryPlayerStore(), MemoryChallengeStore()
        else:
            self.db_manager = DatabaseManager(self.config)
            database = await self.db_manager.connect()
            players = PlayerOps(database, self.db_manager.db_config)
            challenges = ChallengeOps(database, self.db_manager.db_config)

        self.service = PongService(self.config, players, challenges)
        logger.info("Pongbot started", channel=self.config.channel,
                    delta_tau=self.config.delta_tau, in_memory=self.in_memory)
        return self.service

    async def shutdown(self):
        if self.db_manager:
            await self.db_manager.disconnect()
            self.db_manager = None
        self.service = None
        logger.info("Pongbot shutdown complete")

    async def __aenter__(self) -> PongService:
        return await self.startup()

    async def __aexit__(self, exc_type, exc, tb):
        await self.shutdown()


COMMANDS = {
    # command: (service method, number of name arguments)
    "register": ("register_player", 1),
    "show": ("find_player", 1),
    "players": ("get_everyone", 0),
    "reset": ("reset", 1),
    "status": ("check_challenge", 1),
    "challenge": ("create_single_challenge", 2),
    "doubles": ("create_double_challenge", 4),
    "accept": ("accept_challenge", 1),
    "decline": ("decline_challenge", 1),
    "won": ("win", 1),
    "lost": ("lose", 1),
    "gif": ("get_duel_gif", 0),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pongbot", description="Ping pong ladder administration")
    parser.add_argument("--memory", action="store_true",
                        help="use throwaway in-process storage instead of MongoDB")
    commands = parser.add_subparsers(dest="command", required=True)

    for command, (_, arity) in COMMANDS.items():
        sub = commands.add_parser(command)
        if arity:
            sub.add_argument("names", nargs=arity, metavar="NAME")

    board = commands.add_parser("leaderboard")
    board.add_argument("--limit", type=int, default=10)
    return parser


async def run_command(service: PongService, args: argparse.Namespace) -> Result:
    if args.command == "leaderboard":
        return await service.leaderboard(args.limit)
    method, _ = COMMANDS[args.command]
    return await getattr(service, method)(*getattr(args, "names", []))


async def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    setup_logging(config)

    async with PongApp(config, in_memory=args.memory) as service:
        with command_context(args.command):
            result = await run_command(service, args)

    print(render(result))
    return 0 if result.ok else 1


def cli_main():
    """CLI entry point for console_scripts."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    cli_main()
