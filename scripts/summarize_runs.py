#!/usr/bin/env python3
"""
summarize_runs.py: one line per finished jobs.cz crawl, newest last.

Reads the controller's summary records from the activity logs:
    {"component": "jobs_cz.controller", "op": "summary", "saved": ..., ...}
"""

import argparse
import sys
from collections import namedtuple
from datetime import datetime, timezone
from pathlib import Path

from service.logging_utils import iter_log_records

RunLine = namedtuple("RunLine", ["timestamp", "saved", "wanted", "failed", "detail_failures", "seeds", "log_file"])


# ----------------------------------------------------------------------
def parse_iso(ts: str | None) -> datetime | None:
    """Parse ISO-8601 string to timezone-aware UTC datetime."""
    if not ts:
        return None
    ts = ts.strip()
    if ts.endswith("Z"):
        ts = ts[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(ts)
    except ValueError:
        return None
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt.astimezone(timezone.utc)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Summarize finished jobs.cz crawls from activity logs",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--log-dir", type=Path, default=Path("storage") / "logs", help="Directory with activity logs")
    parser.add_argument("--prefix", default="activity", help="Activity log file prefix")
    parser.add_argument("--last", type=int, default=0, help="Only show the N most recent runs (0 = all)")
    return parser.parse_args()


def collect(log_dir: Path, prefix: str) -> list[RunLine]:
    out: list[RunLine] = []
    for file_name, rec in iter_log_records(prefix=prefix, log_dir=str(log_dir)):
        if rec.get("component") != "jobs_cz.controller" or rec.get("op") != "summary":
            continue
        out.append(
            RunLine(
                timestamp=parse_iso(rec.get("ts")),
                saved=rec.get("saved", 0),
                wanted=rec.get("results_wanted", 0),
                failed=rec.get("requests_failed", 0),
                detail_failures=rec.get("detail_failures", 0),
                seeds=rec.get("seeds") or [],
                log_file=file_name,
            )
        )
    out.sort(key=lambda x: (x.timestamp is None, x.timestamp))
    return out


# ----------------------------------------------------------------------
def main() -> None:
    args = parse_args()
    log_dir: Path = args.log_dir.resolve()
    if not log_dir.is_dir():
        print(f"Error: Log directory not found: {log_dir}", file=sys.stderr)
        sys.exit(1)

    runs = collect(log_dir, args.prefix)
    if not runs:
        print("No finished crawls found.")
        return
    if args.last > 0:
        runs = runs[-args.last :]

    print("=" * 80)
    for r in runs:
        when = r.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S") if r.timestamp else "unknown time"
        seed = r.seeds[0] if r.seeds else "?"
        more = f" (+{len(r.seeds) - 1})" if len(r.seeds) > 1 else ""
        print(
            f"  {when} | saved {r.saved}/{r.wanted} | failed requests {r.failed} "
            f"| failed details {r.detail_failures} | {seed}{more} | {r.log_file}"
        )
    print("=" * 80)
    print(f"Total runs: {len(runs)}")


if __name__ == "__main__":
    main()
