# Area: Shared
"""
gameplay_arena.cli - Command-line interface
===========================================

Usage:
    python -m gameplay_arena init-db                    # Create the database
    python -m gameplay_arena worker                     # Run agent workers
    python -m gameplay_arena resume                     # Play stalled agent turns now
    python -m gameplay_arena add-user alice
    python -m gameplay_arena add-agent alice bot connect4 http://localhost:8001/

Every command accepts --config with a JSON config file. Environment
variables (GAMEPLAY_DB_PATH, GAMEPLAY_WORKERS, ...) override it.
"""

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

from ._config import load_config, validate_config
from ._games.base import GameKind
from ._matches import MatchOrchestrator
from ._shared.logging_config import setup_logging
from ._store import AgentRepository, UserRepository, init_database
from ._tasks import TaskQueue, process_task
from .errors import NotFound

logger = logging.getLogger("gameplay_arena")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="gameplay_arena",
        description="Gameplay Arena - turn-based matches between users and HTTP agents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m gameplay_arena init-db
  python -m gameplay_arena --config arena.json worker
  GAMEPLAY_WORKERS=8 python -m gameplay_arena worker
        """,
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to JSON config file",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("init-db", help="Create the database schema")
    commands.add_parser("worker", help="Run the agent worker pool until interrupted")
    commands.add_parser("resume", help="Play every agent turn that is waiting, then exit")

    add_user = commands.add_parser("add-user", help="Register a user")
    add_user.add_argument("username")

    add_agent = commands.add_parser("add-agent", help="Register an agent for a user")
    add_agent.add_argument("username")
    add_agent.add_argument("agentname")
    add_agent.add_argument("game", choices=[kind.value for kind in GameKind])
    add_agent.add_argument("url")
    add_agent.add_argument("--inactive", action="store_true", help="Register as inactive")

    return parser.parse_args(argv)


def run_pending_agent_turns(config: Dict[str, Any]) -> int:
    """Play queued agent turns in this process until none are left."""
    task_queue = TaskQueue()
    orchestrator = MatchOrchestrator(config, task_queue=task_queue)
    try:
        orchestrator.resume_agent_matches()
        played = 0
        while True:
            task = task_queue.get(timeout=0)
            if task is None:
                break
            try:
                process_task(orchestrator, task_queue, task, config["max_agent_chain"])
                played += 1
            finally:
                task_queue.task_done()
        return played
    finally:
        orchestrator.close()


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)
    config = load_config(args.config)

    try:
        validate_config(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.command == "worker":
        from .worker_runner import WorkerRunner

        WorkerRunner(config).run()
        return 0

    setup_logging(log_file_path=config["log_file"], level=config["log_level"])
    init_database(config["db_path"])

    if args.command == "init-db":
        return 0

    if args.command == "resume":
        played = run_pending_agent_turns(config)
        logger.info(f"Played {played} agent turns")
        return 0

    if args.command == "add-user":
        user_id = UserRepository(config["db_path"]).create_user(args.username)
        logger.info(f"Created user {args.username} ({user_id})")
        return 0

    if args.command == "add-agent":
        try:
            agent_id = AgentRepository(config["db_path"]).create_agent(
                args.username,
                args.agentname,
                args.game,
                args.url,
                status="inactive" if args.inactive else "active",
            )
        except NotFound as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        logger.info(f"Created agent {args.username}/{args.agentname} ({agent_id})")
        return 0

    return 1
