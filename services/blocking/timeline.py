"""
Alignment of the network log clock with the main-thread trace clock.

Network records are timed in seconds on the network clock, tasks in ms
relative to the trace. One matched reference pair gives a single offset that
is applied to every network timestamp of the analysis.
"""

import logging
from typing import Any, Dict, Iterable, Optional, Sequence

from .constants import RESOURCE_SEND_REQUEST
from .models import NetworkRecord, TaskForestError, TaskNode

logger = logging.getLogger(__name__)


def _find_send_request_event(trace_events: Iterable[Dict[str, Any]], request_id: str) -> Optional[Dict[str, Any]]:
    for event in trace_events:
        if event.get("name") != RESOURCE_SEND_REQUEST:
            continue
        args = event.get("args")
        data = args.get("data") if isinstance(args, dict) else None
        if isinstance(data, dict) and str(data.get("requestId")) == request_id:
            return event
    return None


def compute_network_timeline_offset(
    trace_events: Sequence[Dict[str, Any]],
    tasks: Sequence[TaskNode],
    network_records: Sequence[NetworkRecord],
) -> Optional[float]:
    """
    Compute the offset (ms) between the network timeline and the task timeline.

    The earliest-starting record and task are the reference points; ties keep
    input order, so the result does not depend on how callers sort inputs.

    Args:
        trace_events: Raw trace events.
        tasks: Main-thread tasks (any order).
        network_records: Network records (any order).

    Returns:
        Offset such that trace_time = 1000 * network_time + offset, or None
        when no trace event matches the reference record.

    Raises:
        TaskForestError: if the reference task carries no trace timestamp.
    """
    if not tasks or not network_records:
        return None

    network = min(network_records, key=lambda r: r.start_time)
    task = min(tasks, key=lambda t: t.start_time)

    event = _find_send_request_event(trace_events, network.request_id)
    if event is None:
        logger.info("No %s event for request %s", RESOURCE_SEND_REQUEST, network.request_id)
        return None

    try:
        task_ts = float(task.event["ts"])
        event_ts = float(event["ts"])
    except (KeyError, TypeError, ValueError):
        raise TaskForestError(f"Reference task {task.id!r} or its matching event has no valid trace timestamp")

    # Event timestamps are in µs, task times in ms.
    task_time = (event_ts - task_ts) / 1000 + task.start_time
    return task_time - 1000 * network.start_time


def fix_time(network_time: float, offset: float) -> float:
    """Convert a network clock timestamp (s) to the trace clock (ms)."""
    return network_time * 1000 + offset
