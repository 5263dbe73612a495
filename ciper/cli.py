"""Command-line entry point for syncing organizations and polling.

Configuration comes from the environment (see
:meth:`ciper.config.CiperConfig.from_env`); the command line only selects
the action and the organizations.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import typing as typ

from ciper.common.concurrency import map_limit
from ciper.config import CiperConfig
from ciper.errors import CiperError
from ciper.factory import CiperRuntime, build_runtime
from ciper.logging import (
    configure_logging,
    get_logger,
    log_exception,
    log_info,
    log_warning,
)
from ciper.sync import LifecycleEvent, OrganizationSyncResult, SyncEvent

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = get_logger(__name__)

_ACTIONS = ("sync", "unsync", "resync")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ciper", description=__doc__)
    parser.add_argument(
        "--log-level",
        default=os.environ.get("CIPER_LOG_LEVEL", "INFO"),
        help="femtologging level (default: CIPER_LOG_LEVEL or INFO)",
    )
    commands = parser.add_subparsers(dest="command")
    for action in _ACTIONS:
        command = commands.add_parser(action, help=f"{action} organizations once")
        command.add_argument(
            "organizations",
            nargs="*",
            help="Organizations to act on (default: CIPER_ORGS)",
        )
    poll = commands.add_parser("poll", help="sync configured organizations forever")
    poll.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between cycles (default: CIPER_POLL_INTERVAL_S)",
    )
    return parser


def _report(results: cabc.Sequence[OrganizationSyncResult]) -> None:
    for result in results:
        print(
            f"{result.action} {result.organization}: "
            f"{result.repositories_qualified}/{result.repositories_listed} "
            "repositories"
        )


async def _run_action(
    runtime: CiperRuntime,
    action: str,
    organizations: cabc.Sequence[str],
    limit: int,
) -> list[OrganizationSyncResult]:
    orchestrator = runtime.orchestrator
    if action == "sync":
        return await orchestrator.sync_orgs(organizations or None)

    run = orchestrator.unsync if action == "unsync" else orchestrator.resync
    orgs = orchestrator.resolve_organizations(organizations or None)
    return await map_limit(orgs, run, limit)


def _log_poll_event(event: SyncEvent) -> None:
    if event.kind is LifecycleEvent.ERROR:
        log_warning(logger, "Poll cycle failed: %s", event.error)
    elif event.kind is LifecycleEvent.POLL_FINISH:
        log_info(logger, "Poll cycle finished")


async def _poll(runtime: CiperRuntime, interval_s: float | None) -> None:
    runtime.poller.events.subscribe(_log_poll_event)
    runtime.poller.start(interval_s, immediate=True)
    await asyncio.Event().wait()


async def _main_async(args: argparse.Namespace, config: CiperConfig) -> int:
    runtime = build_runtime(config)
    command = args.command or ("poll" if config.start else "sync")
    try:
        if command == "poll":
            await _poll(runtime, getattr(args, "interval", None))
            return 0
        results = await _run_action(
            runtime,
            command,
            getattr(args, "organizations", ()),
            config.limit,
        )
    except CiperError as exc:
        log_exception(logger, f"ciper {command} failed: {exc}", exc)
        return 1
    finally:
        await runtime.aclose()

    _report(results)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the ciper command line.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when configuration or a sync fails.

    """
    args = _build_parser().parse_args(argv)

    normalized_level, invalid_level = configure_logging(args.log_level)
    if invalid_level:
        log_warning(
            logger,
            "Invalid log level %r, falling back to %s",
            args.log_level,
            normalized_level,
        )

    try:
        config = CiperConfig.from_env()
    except CiperError as exc:
        print(f"ciper: {exc}")
        return 1

    try:
        return asyncio.run(_main_async(args, config))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
