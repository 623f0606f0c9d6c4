"""MCP application instance.

This module exists to avoid circular import issues when running with `python -m`.
All tool modules should import `mcp` from here, not from server.py.
"""

from mcp.server.fastmcp import FastMCP

mcp = FastMCP(
    "GBFS Map",
    instructions=(
        "Bikeshare (GBFS) map state - load a system, query geofencing zone precedence "
        "at a point, and render stations and vehicles for a zoom level"
    ),
)
