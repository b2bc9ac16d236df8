"""
Data model for blocking task analysis.

Inputs (TaskNode, NetworkRecord) are snapshots built once per analysis and
never modified by the engine. Trace events stay plain dicts, exactly as they
appear in the trace file.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional


class TaskForestError(ValueError):
    """Raised when main-thread task data cannot form a valid forest."""


@dataclass
class TaskNode:
    """A main-thread execution span. Times are ms on the trace clock."""

    id: Any
    start_time: float
    end_time: float
    event: Dict[str, Any] = field(default_factory=dict, repr=False)
    attributable_urls: List[str] = field(default_factory=list)
    parent: Optional["TaskNode"] = field(default=None, repr=False, compare=False)
    children: List["TaskNode"] = field(default_factory=list, repr=False, compare=False)

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    @property
    def is_top_level(self) -> bool:
        return self.parent is None

    @property
    def event_name(self) -> str:
        name = self.event.get("name")
        return name if isinstance(name, str) else ""

    @property
    def event_url(self) -> Optional[str]:
        """URL carried by the originating trace event, if any."""
        args = self.event.get("args")
        data = args.get("data") if isinstance(args, dict) else None
        if not isinstance(data, dict):
            return None
        url = data.get("url")
        return url if isinstance(url, str) and url else None


@dataclass(frozen=True)
class NetworkRecord:
    """One captured network request. Times are seconds on the network clock."""

    url: str
    start_time: float
    end_time: float
    response_received_time: float
    request_id: str
    resource_type: str

    @staticmethod
    def from_json(obj: Dict[str, Any]) -> "NetworkRecord":
        """Accepts DevTools-style camelCase keys, or snake_case."""

        def pick(camel: str, snake: str, default: Any = None) -> Any:
            if camel in obj:
                return obj[camel]
            return obj.get(snake, default)

        start_time = pick("startTime", "start_time")
        end_time = pick("endTime", "end_time")
        if start_time is None or end_time is None:
            raise ValueError(f"Network record is missing timing data: {obj.get('url', '<no url>')}")

        request_id = pick("requestId", "request_id")
        return NetworkRecord(
            url=str(obj.get("url", "")),
            start_time=float(start_time),
            end_time=float(end_time),
            response_received_time=float(pick("responseReceivedTime", "response_received_time", end_time)),
            request_id="" if request_id is None else str(request_id),
            resource_type=str(pick("resourceType", "resource_type", "") or ""),
        )


@dataclass
class AuditResult:
    """Outcome of an analysis that could be applied to the run."""

    passed: bool
    display_text: str
    details: List[Dict[str, Any]]
    title: str = ""
    summary: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "passed" if self.passed else "failed",
            "passed": self.passed,
            "title": self.title,
            "display_text": self.display_text,
            "details": list(self.details),
            "summary": dict(self.summary),
        }


@dataclass(frozen=True)
class NotApplicable:
    """Sentinel for runs the analysis cannot be applied to. Not an error."""

    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "not_applicable",
            "passed": None,
            "reason": self.reason,
            "details": [],
        }


def build_task_forest(entries: Iterable[Dict[str, Any]]) -> List[TaskNode]:
    """
    Build TaskNodes from serialized task entries.

    Each entry carries an `id` and a `parentId` (None for roots); parents are
    resolved by id so the file may list nodes in any order. Children keep
    file order. Returns every node, roots and children, in file order.

    Raises:
        TaskForestError: on malformed entries, duplicate ids, unknown parents,
            cycles, negative durations or a stored duration that disagrees
            with the times.
    """
    nodes: List[TaskNode] = []
    by_id: Dict[Any, TaskNode] = {}
    parent_ids: List[Any] = []

    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise TaskForestError(f"Task entry {index} is not an object")
        task_id = entry.get("id", index)
        if not isinstance(task_id, (str, int)):
            raise TaskForestError(f"Task entry {index} has an invalid id: {task_id!r}")
        if task_id in by_id:
            raise TaskForestError(f"Duplicate task id: {task_id!r}")

        try:
            start_time = float(entry["startTime"])
            end_time = float(entry["endTime"])
            duration = entry.get("duration")
            duration = None if duration is None else float(duration)
        except (KeyError, TypeError, ValueError) as e:
            raise TaskForestError(f"Task {task_id!r} has invalid timing: {e}")

        if end_time < start_time:
            raise TaskForestError(f"Task {task_id!r} ends before it starts")
        if duration is not None and abs(duration - (end_time - start_time)) > 0.001:
            raise TaskForestError(f"Task {task_id!r} duration does not match its start and end times")

        event = entry.get("event") or {}
        if not isinstance(event, dict):
            raise TaskForestError(f"Task {task_id!r} has an event that is not an object")
        urls = entry.get("attributableURLs") or []
        if not isinstance(urls, list):
            raise TaskForestError(f"Task {task_id!r} has attributableURLs that is not a list")

        node = TaskNode(
            id=task_id,
            start_time=start_time,
            end_time=end_time,
            event=dict(event),
            attributable_urls=[str(u) for u in urls],
        )
        nodes.append(node)
        by_id[task_id] = node
        parent_id = entry.get("parentId")
        if parent_id is not None and not isinstance(parent_id, (str, int)):
            raise TaskForestError(f"Task {task_id!r} has an invalid parentId: {parent_id!r}")
        parent_ids.append(parent_id)

    for node, parent_id in zip(nodes, parent_ids):
        if parent_id is None:
            continue
        parent = by_id.get(parent_id)
        if parent is None:
            raise TaskForestError(f"Task {node.id!r} references unknown parent {parent_id!r}")
        if parent is node:
            raise TaskForestError(f"Task {node.id!r} is its own parent")
        node.parent = parent
        parent.children.append(node)

    # Every chain of parents must end at a root.
    rooted = set()
    for node in nodes:
        path = []
        on_path = set()
        current = node
        while current is not None and id(current) not in rooted:
            if id(current) in on_path:
                raise TaskForestError(f"Task {node.id!r} is part of a parent cycle")
            on_path.add(id(current))
            path.append(current)
            current = current.parent
        rooted.update(id(n) for n in path)

    return nodes
