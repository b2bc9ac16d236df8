# pageblocking.py
from fastmcp import FastMCP, Context    # ✅ FastMCP 2.x import
from typing import Dict, Any

from services.blocking_analyzer import (
    analyze_page_blocking,
    get_blocking_analysis_status,
)

mcp = FastMCP(name="pageblocking")

@mcp.tool()
async def analyze_blocking_tasks(test_run_id: str, ctx: Context) -> Dict[str, Any]:
    """
    Find long main-thread tasks that delay ad-related network requests

    Args:
        test_run_id: The unique test run identifier
        ctx: FastMCP workflow context for chaining

    Returns:
        Dictionary with status (passed/failed/not_applicable), the blocking
        tasks found and the paths of the written reports
    """
    return await analyze_page_blocking(test_run_id, ctx)

@mcp.tool()
async def get_analysis_status(test_run_id: str, ctx: Context) -> Dict[str, Any]:
    """
    Get the page load inputs and analysis outputs available for a test run

    Args:
        test_run_id: The unique test run identifier
        ctx: FastMCP workflow context for chaining

    Returns:
        Dictionary containing input availability and analysis completion status
    """
    return await get_blocking_analysis_status(test_run_id, ctx)

if __name__ == "__main__":
    try:
        mcp.run("stdio")
    except KeyboardInterrupt:
        print("Shutting down PageBlocking MCP…")
