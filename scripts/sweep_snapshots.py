"""Delete expired snapshots from a JSON snapshot store.

Usage:
    python scripts/sweep_snapshots.py --store data/ [--ttl-hours 24]
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from gridrun.config import SnapshotConfig
from gridrun.matchmaking import SnapshotPool
from gridrun.progression.summary import pool_report
from gridrun.storage import JsonSnapshotRepository


def main() -> None:
    parser = argparse.ArgumentParser(description="Sweep expired gridrun snapshots")
    parser.add_argument("--store", type=str, required=True, help="JSON store directory")
    parser.add_argument("--ttl-hours", type=float, default=24.0, help="Snapshot lifetime")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    repository = JsonSnapshotRepository(Path(args.store) / "snapshots.json")
    pool = SnapshotPool(repository, SnapshotConfig(ttl_hours=args.ttl_hours))

    print(pool_report(pool.stats()))
    deleted = pool.sweep_expired()
    print(f"Deleted {deleted} expired snapshots")
    print(pool_report(pool.stats()))


if __name__ == "__main__":
    main()
