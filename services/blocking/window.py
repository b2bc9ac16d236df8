"""
Selection of long tasks that ran while target requests were outstanding.

The window closes when the first target request completes: blocking after
that point no longer delays the first ad response.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, AbstractSet, Dict, List, Optional, Sequence, Set

from .attribution import get_attributable_url, is_long
from .classifiers import get_display_url, is_gpt, is_target_request
from .constants import LONG_TASK_DUR_MS, SCRIPT_RESOURCE_TYPE, TASK_NAMES
from .models import NetworkRecord, TaskNode
from .timeline import fix_time

logger = logging.getLogger(__name__)


def get_known_scripts(network_records: Sequence[NetworkRecord]) -> Set[str]:
    return {r.url for r in network_records if r.resource_type == SCRIPT_RESOURCE_TYPE}


def get_target_requests(network_records: Sequence[NetworkRecord]) -> List[NetworkRecord]:
    return [r for r in network_records if is_target_request(r)]


def find_long_tasks(
    tasks: Sequence[TaskNode],
    known_scripts: Optional[AbstractSet[str]],
    threshold_ms: float = LONG_TASK_DUR_MS,
) -> List[TaskNode]:
    return [t for t in tasks if is_long(t, known_scripts, threshold_ms)]


def get_window_end(target_requests: Sequence[NetworkRecord], offset: float) -> float:
    """End of the blocking window on the trace clock (ms)."""
    # TODO: End on ad load rather than ad request end once render timing is captured.
    return fix_time(min(r.end_time for r in target_requests), offset)


def get_task_name(task: TaskNode) -> str:
    name = task.event_name
    return TASK_NAMES.get(name, name)


def select_blocking_tasks(
    long_tasks: Sequence[TaskNode],
    window_end: float,
    known_scripts: Optional[AbstractSet[str]],
) -> List[Dict[str, Any]]:
    """
    Build blocking task records for long tasks starting inside the window.

    Tasks attributed to the tag library itself are left out.
    """
    blocking: List[Dict[str, Any]] = []
    for long_task in long_tasks:
        # Handle cases without any overlap.
        if long_task.start_time > window_end:
            continue
        script_url = get_attributable_url(long_task, known_scripts)
        if script_url and is_gpt(script_url):
            logger.debug("Skipping tag library task at %.1f ms (%s)", long_task.start_time, script_url)
            continue

        blocking.append({
            "name": get_task_name(long_task),
            "script": get_display_url(script_url),
            "start_time": long_task.start_time,
            "end_time": long_task.end_time,
            "duration": long_task.duration,
            "is_top_level": long_task.is_top_level,
        })
    return blocking


@dataclass
class WindowEvaluation:
    """Intermediate results of one blocking window evaluation."""

    target_requests: List[NetworkRecord]
    long_tasks: List[TaskNode] = field(default_factory=list)
    window_end: Optional[float] = None
    blocking: List[Dict[str, Any]] = field(default_factory=list)


def run_window_evaluation(
    tasks: Sequence[TaskNode],
    network_records: Sequence[NetworkRecord],
    offset: float,
    threshold_ms: float = LONG_TASK_DUR_MS,
) -> WindowEvaluation:
    """
    Evaluate the blocking window, keeping the intermediate steps.

    When there are no target requests nothing else is computed and
    `window_end` stays None.
    """
    evaluation = WindowEvaluation(target_requests=get_target_requests(network_records))
    if not evaluation.target_requests:
        return evaluation

    known_scripts = get_known_scripts(network_records)
    evaluation.long_tasks = find_long_tasks(tasks, known_scripts, threshold_ms)
    evaluation.window_end = get_window_end(evaluation.target_requests, offset)
    evaluation.blocking = select_blocking_tasks(evaluation.long_tasks, evaluation.window_end, known_scripts)
    return evaluation


def evaluate_blocking_tasks(
    tasks: Sequence[TaskNode],
    network_records: Sequence[NetworkRecord],
    offset: float,
    threshold_ms: float = LONG_TASK_DUR_MS,
) -> List[Dict[str, Any]]:
    """
    Find long tasks that may delay target requests.

    Args:
        tasks: All main-thread tasks, roots and children.
        network_records: Network log of the page load.
        offset: Network to trace clock offset (ms).
        threshold_ms: Minimum duration of a long task.

    Returns:
        Blocking task records in task order; empty when there are no target
        requests.
    """
    return run_window_evaluation(tasks, network_records, offset, threshold_ms).blocking
