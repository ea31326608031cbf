"""gridboard - Async client that turns a smart-grid telemetry feed into dashboard aggregates."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("gridboard")
except PackageNotFoundError:
    __version__ = "0+local"
from gridboard.client import DashboardClient
from gridboard.config import DashboardConfig
from gridboard.exceptions import FeedDecodeError, FeedStateError, GridboardConfigError, GridboardError
from gridboard.ingestion.decode import decode_frame, parse_frame
from gridboard.ingestion.project import project_message
from gridboard.models import Channel, ChartPoint, ConnectionStatus, FeedMessage
from gridboard.state.events import ChannelUpdate
from gridboard.state.store import DashboardState, DashboardStore
from gridboard.view import DashboardView, build_view, render_text

__all__ = [
    "__version__",
    "Channel",
    "ChannelUpdate",
    "ChartPoint",
    "ConnectionStatus",
    "DashboardClient",
    "DashboardConfig",
    "DashboardState",
    "DashboardStore",
    "DashboardView",
    "FeedDecodeError",
    "FeedMessage",
    "FeedStateError",
    "GridboardConfigError",
    "GridboardError",
    "build_view",
    "decode_frame",
    "parse_frame",
    "project_message",
    "render_text",
]
