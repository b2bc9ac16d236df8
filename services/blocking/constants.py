"""
Constants, lookup tables and report strings for blocking task analysis.

Shared across all blocking analysis modules. Everything here is read-only.
"""

import re
from types import MappingProxyType
from typing import FrozenSet, Mapping

# === Thresholds ===

# Shortest long task reported (ms); shorter long tasks are not shown.
LONG_TASK_DUR_MS = 100

# Max rows in the report before less actionable tasks are dropped.
TASK_LIMIT = 10

# Portion of a long task above this counts as blocking time in the summary.
BLOCKING_TIME_THRESHOLD_MS = 50


# === Trace Events ===

# Trace event emitted when the browser sends a network request.
RESOURCE_SEND_REQUEST = "ResourceSendRequest"

# Resource types as reported in the network log.
SCRIPT_RESOURCE_TYPE = "Script"
TARGET_RESOURCE_TYPE = "XHR"

# Maps low-level trace event names to readable task names.
TASK_NAMES: Mapping[str, str] = MappingProxyType({
    "V8.Execute": "JS Execution",
    "V8.ScriptCompiler": "JS Compilation",
    "v8.compile": "JS Compilation",
    "EvaluateScript": "Script Evaluation",
    "FunctionCall": "Function Call",
    "ParseHTML": "Parse HTML",
})


# === Resource Classification ===

# Google ads hosts, including subdomains.
GOOGLE_ADS_HOST_RE = re.compile(
    r"(^|\.)(doubleclick\.net|google(syndication|tagservices)\.com)$"
)

# Hosts serving the GPT loader script.
GPT_TAG_HOSTS: FrozenSet[str] = frozenset({
    "www.googletagservices.com",
    "pagead2.googlesyndication.com",
    "securepubads.g.doubleclick.net",
})

GPT_TAG_PATHS: FrozenSet[str] = frozenset({
    "/tag/js/gpt.js",
    "/tag/js/gpt_mobile.js",
})

# GPT implementation script, e.g. /gpt/pubads_impl_2019072601.js.
# Rendering bundles (pubads_impl_rendering_*.js) are not part of the loader.
GPT_IMPL_PATH_RE = re.compile(r"^/gpt/pubads_impl([a-z_]*)((?<!rendering)_)\d+\.js")


# === Report Strings ===

TITLE = "No long tasks seem to block ad-related network requests"
FAILURE_TITLE = "Long tasks are blocking ad-related network requests"
DESCRIPTION = (
    "Tasks blocking the main thread can delay the ad related resources, "
    "consider removing long blocking tasks or moving them off the main thread "
    "with web workers. These tasks can be especially detrimental to "
    "performance on less powerful devices."
)
DISPLAY_VALUE = ""
FAILURE_DISPLAY_VALUE = "{count} long task{plural}"

# Table headings for the details section, as (key, item type, label).
HEADINGS = (
    ("script", "url", "Attributable URL"),
    ("start_time", "ms", "Start"),
    ("end_time", "ms", "End"),
    ("duration", "ms", "Duration"),
)


class NotApplicableReason:
    """Reason strings for runs the analysis cannot be applied to.

    Callers match on these, so keep them stable.
    """

    INVALID_TIMING = "Invalid timing task data"
    NO_RECORDS = "No successful network records"
    NO_TASKS = "No tasks to compare"
    NO_EVENT_MATCHING_REQ = "No event matches network records"
    NO_AD_RELATED_REQ = "No ad-related requests"
