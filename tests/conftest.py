import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pytest

# Make local packages importable when running tests from `tests/`.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from services.blocking.models import NetworkRecord, TaskNode  # noqa: E402

SCRIPT_URL = "https://example.com/script.js"


def generate_task(
    start_end: Sequence[float],
    url: Optional[str] = SCRIPT_URL,
    name: str = "RunTask",
    attributable_urls: Optional[List[str]] = None,
    task_id: Any = None,
) -> TaskNode:
    """Task whose trace event timestamp is its start time in µs."""
    start, end = start_end
    data = {"url": url} if url else {}
    return TaskNode(
        id=task_id if task_id is not None else f"task-{start}-{end}",
        start_time=start,
        end_time=end,
        event={"name": name, "ts": start * 1000, "args": {"data": data}},
        attributable_urls=list(attributable_urls or []),
    )


def link(parent: TaskNode, *children: TaskNode) -> TaskNode:
    for child in children:
        child.parent = parent
        parent.children.append(child)
    return parent


def generate_req(
    timing: Sequence[float],
    request_id: Any,
    url: str,
    resource_type: str = "Script",
) -> NetworkRecord:
    """Request from [start, response, end] in ms, stored in seconds."""
    start, response, end = timing
    return NetworkRecord(
        url=url,
        start_time=start / 1000,
        end_time=end / 1000,
        response_received_time=response / 1000,
        request_id=str(request_id),
        resource_type=resource_type,
    )


def make_trace_events(requests: Sequence[NetworkRecord], offset: float = 0) -> List[Dict[str, Any]]:
    """One ResourceSendRequest event per request, placed `offset` ms from its start."""
    return [
        {
            "name": "ResourceSendRequest",
            "ts": (r.start_time * 1000 + offset) * 1000,
            "args": {"data": {"requestId": r.request_id}},
        }
        for r in requests
    ]


class RecordingContext:
    """Stand-in for fastmcp.Context that records messages."""

    def __init__(self) -> None:
        self.messages: List[tuple] = []

    async def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.messages.append(("info", message))

    async def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.messages.append(("warning", message))

    async def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.messages.append(("error", message))


@pytest.fixture
def ctx() -> RecordingContext:
    return RecordingContext()
