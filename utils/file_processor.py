# utils/file_processor.py
import json
import logging
import pandas as pd
from pathlib import Path
from typing import Dict, List, Any, Optional
import aiofiles

from services.blocking.constants import DESCRIPTION, HEADINGS
from services.blocking.models import NetworkRecord, TaskForestError, TaskNode, build_task_forest

logger = logging.getLogger(__name__)

# -----------------------------------------------
# File loading functions
# -----------------------------------------------
def _load_json(file_path: Path) -> Any:
    with open(file_path, 'r', encoding='utf-8') as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {file_path}: {e}")

def load_trace_events(file_path: Path) -> List[Dict[str, Any]]:
    """Load trace events from a Chrome trace file ({"traceEvents": [...]} or a bare list)"""
    data = _load_json(file_path)
    events = data.get('traceEvents') if isinstance(data, dict) else data
    if not isinstance(events, list):
        raise ValueError(f"No trace events found in {file_path}")
    return [e for e in events if isinstance(e, dict)]

def load_task_entries(file_path: Path) -> List[Dict[str, Any]]:
    """Load serialized main-thread task entries ({"tasks": [...]} or a bare list)"""
    data = _load_json(file_path)
    entries = data.get('tasks') if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise ValueError(f"No task list found in {file_path}")
    return entries

def load_main_thread_tasks(file_path: Path) -> List[TaskNode]:
    """Load the main-thread task forest; raises TaskForestError on malformed data"""
    try:
        entries = load_task_entries(file_path)
    except ValueError as e:
        raise TaskForestError(str(e)) from e
    return build_task_forest(entries)

def load_network_records(file_path: Path) -> List[NetworkRecord]:
    """Load network records exported from the network log"""
    data = _load_json(file_path)
    entries = data.get('records') if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise ValueError(f"No network records found in {file_path}")

    records = []
    skipped = 0
    for entry in entries:
        try:
            records.append(NetworkRecord.from_json(entry))
        except (TypeError, ValueError, AttributeError) as e:
            skipped += 1
            logger.debug("Skipping network record: %s", e)
    if skipped:
        logger.warning("Skipped %d network records without usable timing in %s", skipped, file_path)
    return records

# -----------------------------------------------
# File writing functions
# -----------------------------------------------
async def write_json_output(data: Dict[str, Any], file_path: Path) -> None:
    """Write data to JSON file asynchronously"""
    try:
        async with aiofiles.open(file_path, 'w', encoding='utf-8') as f:
            await f.write(json.dumps(data, indent=2, ensure_ascii=False))
    except OSError as e:
        raise OSError(f"Failed to write JSON file {file_path}: {str(e)}") from e

async def write_csv_output(data: List[Dict[str, Any]], file_path: Path,
                          headers: Optional[List[str]] = None) -> None:
    """Write data to CSV file asynchronously"""
    if not data:
        return

    if headers is None:
        headers = list(data[0].keys())

    try:
        async with aiofiles.open(file_path, 'w', newline='', encoding='utf-8') as f:
            # Use pandas for easier async CSV writing
            df = pd.DataFrame(data, columns=headers)
            await f.write(df.to_csv(index=False))
    except OSError as e:
        raise OSError(f"Failed to write CSV file {file_path}: {str(e)}") from e

async def write_markdown_output(content: str, file_path: Path) -> None:
    """Write markdown content to file asynchronously"""
    try:
        async with aiofiles.open(file_path, 'w', encoding='utf-8') as f:
            await f.write(content)
    except OSError as e:
        raise OSError(f"Failed to write Markdown file {file_path}: {str(e)}") from e

# -----------------------------------------------
# Formatting functions
# -----------------------------------------------
def _format_cell(value: Any, item_type: str) -> str:
    if value is None or value == '':
        return 'N/A'
    if item_type == 'ms':
        return f"{value:,.0f} ms"
    return str(value)

def format_blocking_markdown(result: Dict[str, Any], test_run_id: str) -> str:
    """Format blocking task analysis as markdown report"""

    status = result.get('status', 'N/A')
    status_label = {
        'passed': '✅ Pass',
        'failed': '❌ Fail',
        'not_applicable': '➖ Not Applicable',
    }.get(status, status)

    md_content = f"""# Blocking Task Analysis - Run {test_run_id}

## {result.get('title') or 'Long tasks blocking ad-related requests'}
- **Status**: {status_label}
"""

    if status == 'not_applicable':
        md_content += f"- **Reason**: {result.get('reason', 'N/A')}\n"
        md_content += f"\n---\n*Generated: {result.get('analysis_timestamp', 'N/A')}*"
        return md_content

    summary = result.get('summary', {})
    if result.get('display_text'):
        md_content += f"- **Result**: {result['display_text']}\n"
    md_content += f"- **Ad-related Requests**: {summary.get('target_request_count', 'N/A')}\n"
    md_content += f"- **Long Tasks Found**: {summary.get('long_task_count', 'N/A')}\n"
    md_content += f"- **Total Blocking Time**: {_format_cell(summary.get('total_blocking_time_ms'), 'ms')}\n"
    if summary.get('truncated'):
        md_content += (f"- **Note**: {summary.get('blocking_task_count')} blocking tasks found, "
                       f"showing the longest top-level tasks only\n")
    md_content += f"\n{DESCRIPTION}\n\n"

    details = result.get('details', [])
    if details:
        md_content += "## Blocking Tasks\n\n"
        md_content += "| " + " | ".join(label for _, _, label in HEADINGS) + " |\n"
        md_content += "|" + "|".join("-" * (len(label) + 2) for _, _, label in HEADINGS) + "|\n"
        for row in details:
            cells = [_format_cell(row.get(key), item_type) for key, item_type, _ in HEADINGS]
            md_content += "| " + " | ".join(cells) + " |\n"
        md_content += "\n"

    by_script = summary.get('blocking_time_by_script', [])
    if by_script:
        md_content += "## Blocking Time by Script Host\n\n"
        md_content += "| Name | Blocking Time |\n"
        md_content += "|------|---------------|\n"
        for entry in by_script:
            md_content += f"| {entry['name']} | {_format_cell(entry['blocking_time'], 'ms')} |\n"

    md_content += f"\n---\n*Generated: {result.get('analysis_timestamp', 'N/A')}*"

    return md_content
