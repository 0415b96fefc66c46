"""
Run statistics for forgery.

A live medusa run can be piped through forgery for hours, so besides what the
parser saw, the summary records how much memory the process ended up using.
"""

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import psutil


def _default_run_stats() -> dict[str, Any]:
    """Return the canonical default run statistics structure."""
    return {
        "start_time": None,
        "end_time": None,
        "duration_seconds": 0.0,
        "lines": 0,
        "failures": 0,
        "calls": 0,
        "ignored_calls": 0,
        "completed": 0,
        "discarded": 0,
        "process_rss_mb": None,
        "system_load_1min": None,
    }


def collect_run_stats(counters: dict[str, int], start_time: datetime) -> dict[str, Any]:
    """Combine the parser counters with timing and resource usage."""
    stats = _default_run_stats()
    end_time = datetime.now(timezone.utc)
    stats["start_time"] = start_time.isoformat()
    stats["end_time"] = end_time.isoformat()
    stats["duration_seconds"] = round((end_time - start_time).total_seconds(), 3)
    for key, value in counters.items():
        if key in stats:
            stats[key] = value

    stats["process_rss_mb"] = round(psutil.Process().memory_info().rss / (1024 * 1024), 2)
    try:
        stats["system_load_1min"] = psutil.getloadavg()[0]
    except (OSError, AttributeError):
        stats["system_load_1min"] = None

    return stats


def save_run_stats(stats: dict[str, Any], path: Path) -> None:
    """Save the run statistics to a JSON file."""
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(stats, f, indent=2, sort_keys=True)
    except (IOError, OSError) as e:
        print(
            f"Warning: Could not save run stats: {e}",
            file=sys.stderr,
        )


def format_run_summary(stats: dict[str, Any]) -> str:
    """Return the footer printed at the end of a run."""
    lines = [
        "=" * 60,
        "FORGERY RUN SUMMARY",
        "=" * 60,
        f"- Lines Read:        {stats['lines']}",
        f"- Failed Properties: {stats['failures']}",
        f"- Calls Replayed:    {stats['calls']}",
        f"- Reproducers:       {stats['completed']}",
        f"- Discarded:         {stats['discarded']}",
        f"- Duration:          {stats['duration_seconds']:.2f}s",
    ]
    if stats["process_rss_mb"] is not None:
        lines.append(f"- Process RSS:       {stats['process_rss_mb']} MB")
    lines.append("=" * 60)
    return "\n".join(lines)
