"""
Movie & TV catalogue charts
Grouped bar, box plot, bubble scatter and a Vega-Lite chart over IMDb data
"""

__version__ = "1.0.0"

# Config
from .config import get_config, reload_config, AppConfig, DataConfig, ChartConfig, WebConfig

# Data fetching
from .data_fetch import DatasetLoader

# Transforms
from .analysis import (
    RatingSummary,
    BoxStats,
    Outlier,
    ReleaseSummary,
    summarize_by_rating,
    summarize_by_length,
    summarize_releases,
    compute_box_stats,
    length_category,
)

# Charts
from .chart_plot import MovieChartPlotter, VegaChart, figure_to_html

# Orchestrator
from .orchestrator import DashboardOrchestrator, ChartResult, CHART_NAMES

# Report
from .report import HTMLReportGenerator

# Web
from .web import run_app, setup_app

__all__ = [
    # Config
    "get_config",
    "reload_config",
    "AppConfig",
    "DataConfig",
    "ChartConfig",
    "WebConfig",
    # Data fetching
    "DatasetLoader",
    # Transforms
    "RatingSummary",
    "BoxStats",
    "Outlier",
    "ReleaseSummary",
    "summarize_by_rating",
    "summarize_by_length",
    "summarize_releases",
    "compute_box_stats",
    "length_category",
    # Charts
    "MovieChartPlotter",
    "VegaChart",
    "figure_to_html",
    # Orchestrator
    "DashboardOrchestrator",
    "ChartResult",
    "CHART_NAMES",
    # Report
    "HTMLReportGenerator",
    # Web
    "run_app",
    "setup_app",
]
