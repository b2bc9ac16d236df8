import pytest

from services.blocking.models import AuditResult, NetworkRecord, TaskForestError, build_task_forest


def _entry(task_id, start, end, parent_id=None, **extra):
    entry = {"id": task_id, "parentId": parent_id, "startTime": start, "endTime": end}
    entry.update(extra)
    return entry


class TestBuildTaskForest:
    def test_links_parents_and_children(self):
        tasks = build_task_forest([
            _entry(1, 0, 300, event={"name": "RunTask", "ts": 0}),
            _entry(2, 10, 100, parent_id=1, attributableURLs=["https://a.com/s.js"]),
            _entry(3, 120, 250, parent_id=1),
            _entry(4, 130, 200, parent_id=3),
            _entry(5, 400, 450),
        ])

        assert [t.id for t in tasks] == [1, 2, 3, 4, 5]
        root, first, second, grandchild, other_root = tasks
        assert root.children == [first, second]
        assert second.children == [grandchild]
        assert grandchild.parent is second
        assert root.is_top_level and other_root.is_top_level
        assert not first.is_top_level
        assert first.attributable_urls == ["https://a.com/s.js"]
        assert root.event_name == "RunTask"
        assert second.duration == 130

    def test_children_may_precede_parents(self):
        child, parent = build_task_forest([
            _entry("b", 10, 20, parent_id="a"),
            _entry("a", 0, 30),
        ])
        assert child.parent is parent
        assert parent.children == [child]

    def test_bare_entries_get_positional_ids(self):
        tasks = build_task_forest([{"startTime": 0, "endTime": 5}, {"startTime": 1, "endTime": 2, "parentId": 0}])
        assert tasks[1].parent is tasks[0]

    @pytest.mark.parametrize("entries, message", [
        ([_entry(1, 0, 10), _entry(1, 0, 10)], "Duplicate"),
        ([_entry(1, 0, 10, parent_id=9)], "unknown parent"),
        ([_entry(1, 0, 10, parent_id=1)], "own parent"),
        ([_entry(1, 0, 10, parent_id=2), _entry(2, 0, 10, parent_id=1)], "cycle"),
        ([_entry(1, 10, 0)], "ends before"),
        ([_entry(1, 0, 10, duration=12)], "duration"),
        ([{"id": 1, "startTime": "soon", "endTime": 10}], "invalid timing"),
        ([{"id": 1, "endTime": 10}], "invalid timing"),
        (["not a task"], "not an object"),
        ([_entry(1, 0, 10, duration="abc")], "invalid timing"),
        ([_entry(1, 0, 10, event="oops")], "event that is not an object"),
        ([_entry(1, 0, 10, attributableURLs="https://a.com/s.js")], "not a list"),
        ([_entry([1], 0, 10)], "invalid id"),
        ([_entry(1, 0, 10, parent_id={"id": 2})], "invalid parentId"),
    ])
    def test_malformed_forests(self, entries, message):
        with pytest.raises(TaskForestError, match=message):
            build_task_forest(entries)

    def test_event_url(self):
        with_url, without_url = build_task_forest([
            _entry(1, 0, 10, event={"args": {"data": {"url": "https://a.com/s.js"}}}),
            _entry(2, 0, 10, event={"args": {"frame": "0x1"}}),
        ])
        assert with_url.event_url == "https://a.com/s.js"
        assert without_url.event_url is None

    @pytest.mark.parametrize("event", [
        {"ts": 0, "args": "bad"},
        {"ts": 0, "args": {"data": ["https://a.com/s.js"]}},
        {"ts": 0, "args": {"data": {"url": 42}}},
        {"name": ["RunTask"]},
    ])
    def test_odd_event_payloads_are_ignored(self, event):
        (task,) = build_task_forest([_entry(1, 0, 10, event=event)])
        assert task.event_url is None
        assert task.event_name == ""


class TestNetworkRecord:
    def test_from_devtools_keys(self):
        record = NetworkRecord.from_json({
            "url": "https://a.com/s.js",
            "startTime": 1.5,
            "endTime": 2.5,
            "responseReceivedTime": 2.0,
            "requestId": 1000.12,
            "resourceType": "Script",
        })
        assert record == NetworkRecord("https://a.com/s.js", 1.5, 2.5, 2.0, "1000.12", "Script")

    def test_from_snake_case_keys(self):
        record = NetworkRecord.from_json({
            "url": "https://a.com/api",
            "start_time": 1,
            "end_time": 3,
            "request_id": "7",
            "resource_type": "XHR",
        })
        assert record.response_received_time == 3.0
        assert record.resource_type == "XHR"

    def test_missing_timing(self):
        with pytest.raises(ValueError, match="timing"):
            NetworkRecord.from_json({"url": "https://a.com/", "startTime": 1})


def test_audit_result_to_dict():
    result = AuditResult(passed=False, display_text="1 long task", details=[{"duration": 120}], title="t")
    assert result.to_dict() == {
        "status": "failed",
        "passed": False,
        "title": "t",
        "display_text": "1 long task",
        "details": [{"duration": 120}],
        "summary": {},
    }
