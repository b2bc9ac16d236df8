"""
Attribution of main-thread tasks to the scripts that caused them.

A task is attributed by looking at its own trace event, then its
attributable URLs, then its descendants. Known scripts (records typed
"Script" in the network log) are preferred; when none match, the search is
repeated without that preference so tasks with some candidate URL are not
dropped.
"""

from typing import AbstractSet, Callable, Optional

from .constants import LONG_TASK_DUR_MS
from .models import TaskNode


def _search(task: TaskNode, accept: Callable[[str], bool]) -> str:
    """Depth-first, pre-order search for the first acceptable URL."""
    stack = [task]
    while stack:
        node = stack.pop()

        event_url = node.event_url
        if event_url and accept(event_url):
            return event_url

        for url in node.attributable_urls:
            if url and accept(url):
                return url

        # Reversed so the first child is visited first.
        stack.extend(reversed(node.children))
    return ""


def get_attributable_url(task: TaskNode, known_scripts: Optional[AbstractSet[str]] = None) -> str:
    """
    Returns the attributable script for this task, or "" if there is none.

    Args:
        task: Task to attribute.
        known_scripts: URLs of script resources. None disables the filter.
    """
    if known_scripts is None:
        return _search(task, lambda url: True)

    url = _search(task, lambda url: url in known_scripts)
    if url:
        return url
    return _search(task, lambda url: True)


def is_long(task: TaskNode, known_scripts: Optional[AbstractSet[str]], threshold_ms: float = LONG_TASK_DUR_MS) -> bool:
    """
    Whether the task is long enough and attributable enough to report.

    Tasks shorter than the threshold and tasks with no attributable URL are
    never reported.
    """
    if task.duration < threshold_ms:
        return False  # Short task
    script = get_attributable_url(task, known_scripts)
    if not script:
        return False
    if task.parent is not None:
        # Only show this long task if doing so adds more information for debugging.
        # So we hide it if it's attributed to the same script as the parent task.
        parent_script = get_attributable_url(task.parent, known_scripts)
        return script != parent_script
    return True
