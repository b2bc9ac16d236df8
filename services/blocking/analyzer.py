"""
Blocking task audit: the full analysis of one page load.

Steps:
- Build or receive the main-thread task forest
- Align the network clock with the trace clock (timeline.py)
- Classify long tasks and attribute them (attribution.py)
- Keep tasks inside the blocking window (window.py)
- Rank and cap the result (ranking.py)

Each run is a pure function of its inputs.
"""

import logging
from typing import Any, Callable, Dict, List, Sequence, Union

from .constants import (
    BLOCKING_TIME_THRESHOLD_MS,
    DISPLAY_VALUE,
    FAILURE_DISPLAY_VALUE,
    FAILURE_TITLE,
    LONG_TASK_DUR_MS,
    TASK_LIMIT,
    TITLE,
    NotApplicableReason,
)
from .models import AuditResult, NetworkRecord, NotApplicable, TaskForestError, TaskNode
from .ranking import rank_blocking_tasks, summarize_blocking_time
from .timeline import compute_network_timeline_offset
from .window import run_window_evaluation

logger = logging.getLogger(__name__)

THROTTLING_METHODS = ("provided", "simulate")

TaskSource = Union[Sequence[TaskNode], Callable[[], Sequence[TaskNode]]]


def format_display_value(count: int) -> str:
    if not count:
        return DISPLAY_VALUE
    return FAILURE_DISPLAY_VALUE.format(count=count, plural="" if count == 1 else "s")


def _resolve_tasks(tasks: TaskSource) -> List[TaskNode]:
    if callable(tasks):
        return list(tasks())
    return list(tasks)


def audit_blocking_tasks(
    trace_events: Sequence[Dict[str, Any]],
    tasks: TaskSource,
    network_records: Sequence[NetworkRecord],
    threshold_ms: float = LONG_TASK_DUR_MS,
    task_limit: int = TASK_LIMIT,
    blocking_time_threshold_ms: float = BLOCKING_TIME_THRESHOLD_MS,
    throttling_method: str = "provided",
) -> Union[AuditResult, NotApplicable]:
    """
    Determine whether long main-thread tasks delay ad-related requests.

    Args:
        trace_events: Raw trace events of the page load.
        tasks: Main-thread tasks (all nodes of the forest), or a callable
            building them. TaskForestError from the callable means the
            timing data is invalid.
        network_records: Network log of the page load.
        threshold_ms: Minimum duration of a reported long task.
        task_limit: Max number of reported tasks.
        blocking_time_threshold_ms: Threshold used for the blocking time summary.
        throttling_method: Only "provided" (measured) timings are supported.

    Returns:
        AuditResult, or NotApplicable with a stable reason string.

    Raises:
        NotImplementedError: for the "simulate" throttling method.
        ValueError: for an unknown throttling method.
    """
    if throttling_method not in THROTTLING_METHODS:
        raise ValueError(
            f"Unknown throttling method '{throttling_method}'. "
            f"Expected one of: {', '.join(THROTTLING_METHODS)}"
        )
    if throttling_method == "simulate":
        raise NotImplementedError("Simulated long task estimation is not implemented")

    try:
        task_list = _resolve_tasks(tasks)
    except TaskForestError as e:
        logger.warning("Invalid main-thread task data: %s", e)
        return NotApplicable(NotApplicableReason.INVALID_TIMING)

    if not network_records:
        return NotApplicable(NotApplicableReason.NO_RECORDS)
    if not task_list:
        return NotApplicable(NotApplicableReason.NO_TASKS)

    try:
        offset = compute_network_timeline_offset(trace_events, task_list, network_records)
    except TaskForestError as e:
        logger.warning("Cannot align timelines: %s", e)
        return NotApplicable(NotApplicableReason.INVALID_TIMING)
    if offset is None:
        return NotApplicable(NotApplicableReason.NO_EVENT_MATCHING_REQ)

    evaluation = run_window_evaluation(task_list, network_records, offset, threshold_ms)
    if not evaluation.target_requests:
        return NotApplicable(NotApplicableReason.NO_AD_RELATED_REQ)

    target_requests = evaluation.target_requests
    long_tasks = evaluation.long_tasks
    window_end = evaluation.window_end
    blocking = evaluation.blocking
    ranked = rank_blocking_tasks(blocking, task_limit)

    logger.info(
        "Offset %.3f ms, window end %.1f ms: %d long tasks, %d blocking, %d reported",
        offset, window_end, len(long_tasks), len(blocking), len(ranked),
    )

    summary = {
        "offset": offset,
        "window_end": window_end,
        "target_request_count": len(target_requests),
        "long_task_count": len(long_tasks),
        "blocking_task_count": len(blocking),
        "truncated": len(blocking) > task_limit,
    }
    summary.update(summarize_blocking_time(ranked, blocking_time_threshold_ms))

    passed = len(ranked) == 0
    return AuditResult(
        passed=passed,
        display_text=format_display_value(len(ranked)),
        details=ranked,
        title=TITLE if passed else FAILURE_TITLE,
        summary=summary,
    )
