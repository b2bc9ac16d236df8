"""
Ranking, truncation and summary of blocking task records.
"""

from typing import Any, Dict, List, Sequence

from .classifiers import get_script_host
from .constants import BLOCKING_TIME_THRESHOLD_MS, TASK_LIMIT


def rank_blocking_tasks(records: Sequence[Dict[str, Any]], cap: int = TASK_LIMIT) -> List[Dict[str, Any]]:
    """
    Cap the report at `cap` records.

    Short lists come back unchanged. Longer ones keep only top-level tasks
    with an attributed script (child tasks and unattributed ones are the
    least actionable), the `cap` longest of those, in start time order.
    Once truncation kicks in the result is not complete.
    """
    if len(records) <= cap:
        return list(records)

    actionable = [r for r in records if r["script"] and r["is_top_level"]]
    # Only show the longest tasks.
    longest = sorted(actionable, key=lambda r: r["duration"], reverse=True)[:cap]
    return sorted(longest, key=lambda r: r["start_time"])


def summarize_blocking_time(
    records: Sequence[Dict[str, Any]],
    threshold_ms: float = BLOCKING_TIME_THRESHOLD_MS,
) -> Dict[str, Any]:
    """
    Total blocking time of the reported tasks, and its split by script host.

    The blocking time of a task is the part of its duration above
    `threshold_ms`.
    """
    total = 0.0
    by_host: Dict[str, float] = {}
    for record in records:
        blocking_time = max(0.0, record["duration"] - threshold_ms)
        total += blocking_time
        host = get_script_host(record["script"]) or "Other"
        by_host[host] = by_host.get(host, 0.0) + blocking_time

    # Sort in descending order
    by_script = [
        {"name": host, "blocking_time": blocking_time}
        for host, blocking_time in sorted(by_host.items(), key=lambda kv: kv[1], reverse=True)
    ]
    return {
        "total_blocking_time_ms": total,
        "blocking_time_by_script": by_script,
    }
