# services/blocking_analyzer.py
"""
Blocking Task Analysis for PageBlocking MCP Server.

Answers the question: "Is main-thread work delaying the page's ad requests,
and which scripts are responsible?"

Inputs (all under artifacts/<run_id>/pageload/):
    - trace.json               Chrome trace of the page load
    - main_thread_tasks.json   main-thread task forest built from the trace
    - network_records.json     network log of the page load

Outputs (all under artifacts/<run_id>/analysis/):
    - blocking_tasks.json
    - blocking_tasks.csv
    - blocking_tasks.md
"""

import logging
import datetime
from pathlib import Path
from typing import Any, Dict, List
from dotenv import load_dotenv
from fastmcp import Context

from utils.config import load_config, load_blocking_config, get_artifacts_path
from utils.file_processor import (
    load_trace_events,
    load_main_thread_tasks,
    load_network_records,
    write_json_output,
    write_csv_output,
    write_markdown_output,
    format_blocking_markdown,
)
from services.blocking import audit_blocking_tasks, AuditResult

# ---------------------------------------------------------------------------
# Module-level configuration
# ---------------------------------------------------------------------------
load_dotenv()
CONFIG = load_config()
BLOCKING_CONFIG = load_blocking_config(CONFIG)

logger = logging.getLogger(__name__)
log_level = CONFIG.get("logging", {}).get("log_level", "INFO")
logging.getLogger("services").setLevel(getattr(logging, str(log_level).upper(), logging.INFO))

OUTPUT_BASENAME = "blocking_tasks"
DETAIL_COLUMNS = ["name", "script", "start_time", "end_time", "duration", "is_top_level"]


def _input_paths(test_run_id: str) -> Dict[str, Path]:
    """Resolve the input files of a run."""
    input_dir = Path(get_artifacts_path(CONFIG)) / test_run_id / BLOCKING_CONFIG["input_folder"]
    return {
        "trace": input_dir / BLOCKING_CONFIG["trace_file"],
        "tasks": input_dir / BLOCKING_CONFIG["tasks_file"],
        "network": input_dir / BLOCKING_CONFIG["network_file"],
    }


def _analysis_path(test_run_id: str) -> Path:
    return Path(get_artifacts_path(CONFIG)) / test_run_id / "analysis"


# ============================================================================
# PUBLIC API  (called from pageblocking.py)
# ============================================================================

async def analyze_page_blocking(test_run_id: str, ctx: Context) -> Dict[str, Any]:
    """
    Run the blocking task analysis for a stored page load.

    Args:
        test_run_id: The unique test run identifier
        ctx: FastMCP workflow context

    Returns:
        Dictionary with status (passed/failed/not_applicable), findings and
        output files, or an error dictionary.
    """
    try:
        await ctx.info(f"Starting blocking task analysis for run {test_run_id}")

        paths = _input_paths(test_run_id)
        for name, path in paths.items():
            if not path.exists():
                msg = f"Page load {name} file not found: {path}. Capture the page load first."
                await ctx.error(msg)
                return {
                    "error": msg,
                    "status": "prerequisite_missing",
                    "test_run_id": test_run_id,
                    "expected_file": str(path),
                }

        trace_events = load_trace_events(paths["trace"])
        network_records = load_network_records(paths["network"])
        await ctx.info(f"Loaded {len(trace_events)} trace events and {len(network_records)} network records")

        result = audit_blocking_tasks(
            trace_events,
            lambda: load_main_thread_tasks(paths["tasks"]),
            network_records,
            threshold_ms=BLOCKING_CONFIG["long_task_threshold_ms"],
            task_limit=BLOCKING_CONFIG["task_limit"],
            blocking_time_threshold_ms=BLOCKING_CONFIG["blocking_time_threshold_ms"],
            throttling_method=BLOCKING_CONFIG["throttling_method"],
        )

        response = result.to_dict()
        response["test_run_id"] = test_run_id
        response["analysis_timestamp"] = datetime.datetime.now().isoformat()

        if isinstance(result, AuditResult):
            await ctx.info(f"Blocking task analysis {response['status']}: "
                           f"{len(result.details)} blocking task(s) reported")
        else:
            await ctx.warning(f"Blocking task analysis not applicable: {result.reason}")

        if BLOCKING_CONFIG["write_outputs"]:
            response["output_files"] = await generate_blocking_outputs(response, test_run_id)

        return response

    except NotImplementedError:
        raise
    except Exception as e:
        error_msg = f"Blocking task analysis failed: {str(e)}"
        logger.exception("Blocking task analysis failed for run %s", test_run_id)
        await ctx.error(error_msg)
        return {"error": error_msg, "status": "failed", "test_run_id": test_run_id}


async def generate_blocking_outputs(result: Dict[str, Any], test_run_id: str) -> Dict[str, str]:
    """Write JSON, CSV and markdown outputs for an analysis result."""
    analysis_path = _analysis_path(test_run_id)
    analysis_path.mkdir(parents=True, exist_ok=True)

    output_files: Dict[str, str] = {}

    json_file = analysis_path / f"{OUTPUT_BASENAME}.json"
    await write_json_output(result, json_file)
    output_files["json"] = str(json_file)

    details: List[Dict[str, Any]] = result.get("details", [])
    if details:
        csv_file = analysis_path / f"{OUTPUT_BASENAME}.csv"
        await write_csv_output(details, csv_file, DETAIL_COLUMNS)
        output_files["csv"] = str(csv_file)

    md_file = analysis_path / f"{OUTPUT_BASENAME}.md"
    await write_markdown_output(format_blocking_markdown(result, test_run_id), md_file)
    output_files["markdown"] = str(md_file)

    return output_files


async def get_blocking_analysis_status(test_run_id: str, ctx: Context) -> Dict[str, Any]:
    """
    Report which inputs of a run exist and which outputs have been written.

    Args:
        test_run_id: The unique test run identifier
        ctx: FastMCP workflow context

    Returns:
        Dictionary with per-file availability and a ready flag.
    """
    inputs = {name: path.exists() for name, path in _input_paths(test_run_id).items()}
    analysis_path = _analysis_path(test_run_id)
    outputs = {
        ext: (analysis_path / f"{OUTPUT_BASENAME}.{ext}").exists()
        for ext in ("json", "csv", "md")
    }

    ready = all(inputs.values())
    if not ready:
        missing = ", ".join(name for name, present in inputs.items() if not present)
        await ctx.info(f"Run {test_run_id} is missing page load inputs: {missing}")

    return {
        "test_run_id": test_run_id,
        "inputs": inputs,
        "outputs": outputs,
        "ready_for_analysis": ready,
        "analysis_complete": outputs["json"],
    }
