import argparse
import asyncio
import logging
from datetime import UTC, datetime

from pydantic import BaseModel

from gbfs_map.app import mcp
from gbfs_map.tools import map_tools  # noqa: F401  (registers tools)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    system_loaded: bool


@mcp.tool()
def health() -> HealthResponse:
    """Check if the GBFS map server is running and healthy.

    Returns the server status, version, current timestamp and whether a
    GBFS system is loaded.
    """
    from gbfs_map import __version__

    return HealthResponse(
        status="ok",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
        system_loaded=map_tools.get_controller().is_loaded,
    )


async def run_summary(source: str) -> None:
    """Load a GBFS system and print what it contains."""
    from gbfs_map.data.feed_loader import GBFSLoadError
    from gbfs_map.services.map_controller import MapController

    controller = MapController()
    try:
        summary = await controller.load_system(source)
    except GBFSLoadError as e:
        print(f"Error: {e}")
        raise SystemExit(1) from e
    finally:
        controller.close()

    print(f"\n{summary.system_name or summary.source}")
    if summary.operator:
        print(f"  operator: {summary.operator}")
    print(f"  GBFS version: {summary.gbfs_version or 'unknown'}")
    print(f"  {summary.feeds_message}")
    for error in summary.errors:
        print(f"    {error.feed}: {error.error}")
    print(f"  stations: {summary.stations:,} ({summary.virtual_stations:,} virtual)")
    print(f"  vehicles: {summary.vehicles:,}")
    print(f"  vehicle types: {summary.vehicle_types:,}")
    print(f"  pricing plans: {summary.pricing_plans:,}")
    stats = summary.zone_statistics
    print(f"  geofencing zones: {stats.zones:,}")
    if stats.zones:
        print(f"    no-ride: {stats.no_ride:,}")
        print(f"    speed-limited: {stats.speed_limited:,}")
        print(f"    station parking: {stats.station_parking:,}")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="gbfs-map",
        description="GBFS Map MCP Server",
    )
    subparsers = parser.add_subparsers(dest="command")

    # summary command
    summary_parser = subparsers.add_parser(
        "summary",
        help="Load a GBFS system and print a summary",
    )
    summary_parser.add_argument(
        "source",
        help="gbfs.json URL or directory of GBFS feed files",
    )
    summary_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.command == "summary":
        log_level = logging.DEBUG if args.verbose else logging.INFO
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

        asyncio.run(run_summary(args.source))
    else:
        # Default: run MCP server
        mcp.run()


if __name__ == "__main__":
    main()
