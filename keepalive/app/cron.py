"""Scheduled entry point.

The schedule itself lives in deployment config (platform cron, systemd timer,
crontab). Each tick runs::

    keepalive-cron            # one run, exit 0 on success, 1 on failure

or, where no external scheduler is available::

    keepalive-cron --loop --interval 600
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .config import Settings, settings as default_settings
from .history import HistoryStore
from .jobs import keep_alive
from .runner import SOURCE_SCHEDULED, KeepAliveRunner, RunResult
from .store import open_kv

logger = logging.getLogger(__name__)


async def scheduled(runner: KeepAliveRunner, history: HistoryStore) -> RunResult:
    return await keep_alive(runner, history, SOURCE_SCHEDULED)


async def run_loop(runner: KeepAliveRunner, history: HistoryStore, interval_s: float,
                   max_runs: Optional[int] = None) -> int:
    """Run every ``interval_s`` seconds; returns the number of completed runs."""
    done = 0
    while True:
        result = await scheduled(runner, history)
        done += 1
        for line in result.messages:
            logger.info(line)
        if max_runs is not None and done >= max_runs:
            break
        await asyncio.sleep(interval_s)
    return done


def _parse_args(argv: Optional[List[str]], cfg: Settings) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="keepalive-cron", description="Run the Koyeb keep-alive check")
    p.add_argument("--loop", action="store_true", help="keep running on a fixed interval")
    p.add_argument("--interval", type=float, default=cfg.INTERVAL_S,
                   help="seconds between runs with --loop (default: %(default)s)")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None, cfg: Optional[Settings] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    cfg = cfg or default_settings
    args = _parse_args(argv, cfg)
    if args.interval <= 0:
        logger.error("--interval must be positive")
        return 2

    runner = KeepAliveRunner(cfg)
    history = HistoryStore.open(open_kv(cfg), cfg.LOG_LIMIT)

    if args.loop:
        try:
            asyncio.run(run_loop(runner, history, args.interval))
        except KeyboardInterrupt:
            logger.info("Stopped")
        return 0

    result = asyncio.run(scheduled(runner, history))
    for line in result.messages:
        print(line)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
