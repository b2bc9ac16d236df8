"""
Blocking task analysis package for PageBlocking MCP.

This package correlates a page load's main-thread trace with its network log
to find long tasks that delay ad-related network requests.

Version: 0.1.0
License: MIT
"""

from .analyzer import audit_blocking_tasks
from .models import AuditResult, NetworkRecord, NotApplicable, TaskForestError, TaskNode, build_task_forest

__all__ = [
    "audit_blocking_tasks",
    "build_task_forest",
    "AuditResult",
    "NetworkRecord",
    "NotApplicable",
    "TaskForestError",
    "TaskNode",
]
__version__ = "0.1.0"
