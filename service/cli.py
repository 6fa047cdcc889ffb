# service/cli.py
"""
Command-line entrypoints.

Subcommands
-----------
run [--input FILE] [--kwargs k=v ...] [--keyword ...] [--results-wanted N] [--links-only] [--output PATH]
    - Builds the crawl input from an optional JSON file, then k=v overrides, then the
      dedicated search/budget flags (last one wins)
    - Runs modules.jobs_cz.run(...) and prints a one-line summary
    - Exit 0 on success, 1 on a top-level failure (bad input, seed resolution, ...)

validate-config [--input FILE] [--kwargs k=v ...]
    - Validates the input and prints the resolved seed URLs without crawling
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import time
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from modules.jobs_cz import run as run_jobs_cz
from modules.jobs_cz.lib.config import Settings, load_input
from modules.jobs_cz.lib.controller import resolve_seed_urls
from modules.jobs_cz.lib.state import UNBOUNDED
from service import logging_utils as L

LOG = logging.getLogger("service.cli")


# ----------------------------- Logging setup ---------------------------------
def _ensure_logging() -> None:
    """Initialize a reasonable logging setup if none exists yet."""
    root = logging.getLogger()
    if not root.handlers:
        level = os.getenv("LOG_LEVEL", "INFO").upper()
        logging.basicConfig(
            level=getattr(logging, level, logging.INFO),
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )


# -------------------------- Utility / glue code ------------------------------
def _parse_kv_pairs(pairs: Iterable[str]) -> dict[str, Any]:
    """
    Parse key=value strings into a dict.
    - Values that look like JSON (true/false/null/number/object/array) are parsed.
    - Otherwise keep as raw strings.
    """
    out: dict[str, Any] = {}
    for raw in pairs:
        if "=" not in raw:
            raise argparse.ArgumentTypeError(f"--kwargs item must be key=value (got {raw!r})")
        k, v = raw.split("=", 1)
        k = k.strip()
        v = v.strip()
        if not k:
            raise argparse.ArgumentTypeError(f"Invalid key in --kwargs item {raw!r}")
        try:
            out[k] = json.loads(v)
        except ValueError:
            out[k] = v
    return out


# argparse dest -> crawl input key
_FLAG_KEYS = {
    "keyword": "keyword",
    "location": "location",
    "category": "category",
    "results_wanted": "results_wanted",
    "max_pages": "max_pages",
    "start_url": "startUrl",
    "output": "output_path",
}


def _build_input(args: argparse.Namespace) -> dict[str, Any]:
    """Input file first, then --kwargs overrides, then dedicated flags."""
    data: dict[str, Any] = {}
    path = args.input or os.getenv("JOBS_CZ_INPUT")
    if path:
        data.update(load_input(path))
    data.update(_parse_kv_pairs(args.kwargs or []))
    for dest, key in _FLAG_KEYS.items():
        value = getattr(args, dest, None)
        if value is not None:
            data[key] = value
    if getattr(args, "links_only", False):
        data["collectDetails"] = False
    return data


def _format_summary(summary: dict[str, Any]) -> str:
    wanted = summary.get("results_wanted")
    target = "unbounded" if wanted == UNBOUNDED else str(wanted)
    return (
        f"DONE: saved {summary['saved']} item(s) of {target} "
        f"({summary['requests_finished']} requests ok, {summary['requests_failed']} failed, "
        f"{summary.get('detail_failures', 0)} detail pages dropped) -> {summary.get('output_path')}"
    )


def _now_iso() -> str:
    return datetime.now().astimezone().isoformat()


# ------------------------------ Subcommands ----------------------------------
def cmd_run(args: argparse.Namespace) -> int:
    start_time = time.monotonic()
    kwargs: dict[str, Any] = {}
    try:
        kwargs = _build_input(args)
        LOG.debug("Run jobs_cz with input=%s", kwargs)
        summary = run_jobs_cz(**kwargs)
        L.write_activity_log({
            "ts": _now_iso(),
            "event": "cli_run",
            "saved": summary.get("saved"),
            "duration_ms": int((time.monotonic() - start_time) * 1000),
        })
        print(_format_summary(summary))
        return 0

    except KeyboardInterrupt:
        return 130
    except Exception as e:
        LOG.exception("Crawl failed: %s", e)
        print(f"FAILURE: {e}", file=sys.stderr)
        L.write_error_log({
            "ts": _now_iso(),
            "where": "cli.run",
            "input": L.redact(kwargs),
            "error": repr(e),
            "duration_ms": int((time.monotonic() - start_time) * 1000),
        })
        return 1


def cmd_validate_config(args: argparse.Namespace) -> int:
    try:
        settings = Settings.from_env_and_kwargs(_build_input(args))
        seeds = resolve_seed_urls(settings)
    except KeyboardInterrupt:
        return 130
    except Exception as e:
        LOG.exception("Configuration validation failed: %s", e)
        print(f"ERROR: configuration invalid: {e}", file=sys.stderr)
        return 1

    print("OK: configuration is valid.")
    for s in seeds:
        print(f"  seed: {s}")
    return 0


# ------------------------------- Argparse ------------------------------------
def _add_input_args(sp: argparse.ArgumentParser) -> None:
    sp.add_argument("--input", help="Path to a JSON input file (fallbacks to JOBS_CZ_INPUT env).")
    sp.add_argument(
        "--kwargs",
        metavar="k=v",
        nargs="*",
        help="Input overrides (JSON values supported), e.g. keyword=developer results_wanted=20.",
    )
    g = sp.add_argument_group("search")
    g.add_argument("--keyword", help="Free-text search keyword.")
    g.add_argument("--location", help="Locality filter, e.g. Praha.")
    g.add_argument("--category", help="Category filter; also stamped on every record.")
    g.add_argument("--start-url", dest="start_url", help="Explicit listing URL to start from.")
    g.add_argument("--results-wanted", dest="results_wanted", type=int, help="Stop after this many records.")
    g.add_argument("--max-pages", dest="max_pages", type=int, help="Listing pages to follow per seed.")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="python -m service.cli",
        description="jobs.cz crawler command-line tools",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    # run
    sp = sub.add_parser("run", help="Crawl jobs.cz and append records to the output dataset.")
    _add_input_args(sp)
    sp.add_argument("--output", help="Output JSONL path (overrides output_path).")
    sp.add_argument(
        "--links-only",
        action="store_true",
        help="Skip detail pages; emit {url, _source} records straight from the listings.",
    )
    sp.set_defaults(func=cmd_run)

    # validate-config
    sp = sub.add_parser("validate-config", help="Validate input and print the seed URLs.")
    _add_input_args(sp)
    sp.set_defaults(func=cmd_validate_config)

    return p


# --------------------------------- Main --------------------------------------
def main(argv: Iterable[str] | None = None) -> int:
    _ensure_logging()
    parser = _build_parser()
    args = parser.parse_args(args=list(argv) if argv is not None else None)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
