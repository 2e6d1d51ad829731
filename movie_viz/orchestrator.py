"""
Dashboard Orchestrator
======================

Runs the four chart pipelines:
    - load the dataset
    - transform it in memory
    - hand it to the chart library

Each pipeline is independent: a failing chart is logged and skipped, the
others still render.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .analysis import summarize_by_length, summarize_by_rating, summarize_releases
from .chart_plot import MovieChartPlotter, figure_to_html, load_vega_chart, spec_summary
from .config import AppConfig, get_config
from .data_fetch import DatasetLoader
from .utils.validation import validate_dataframe

logger = logging.getLogger(__name__)


# Page container ids, in page order
CHART_NAMES = ["barplot", "boxplot", "scatter", "chart"]


@dataclass
class ChartResult:
    """Outcome of one chart pipeline."""
    name: str
    timestamp: datetime = field(default_factory=datetime.now)

    html: str = ""
    data: Any = None

    # Status
    success: bool = True
    error_message: str = ""
    computation_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "timestamp": self.timestamp.isoformat(),
            "success": self.success,
            "error_message": self.error_message,
            "computation_time_ms": round(self.computation_time_ms, 2),
        }


class DashboardOrchestrator:
    """
    Coordinates dataset loading, transforms and chart rendering.

    Example:
        >>> orchestrator = DashboardOrchestrator()
        >>> results = orchestrator.render_all()
        >>> [r.name for r in results if r.success]
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        loader: Optional[DatasetLoader] = None,
    ):
        self.config = config or get_config()
        self.loader = loader or DatasetLoader(self.config.data, data_dir=self.config.data_dir)
        self.plotter = MovieChartPlotter(self.config.chart)

        self._builders: Dict[str, Callable[[], Any]] = {
            "barplot": self.rating_summaries,
            "boxplot": self.length_stats,
            "scatter": self.release_summaries,
            "chart": self.vega_chart,
        }
        self._stats = {
            "total_renders": 0,
            "successful_renders": 0,
            "failed_renders": 0,
            "total_time_ms": 0.0,
        }

    # ------------------------------------------------------------------
    # Data pipelines
    # ------------------------------------------------------------------

    def rating_summaries(self):
        name = self.config.data.age_data
        df = self.loader.load_csv(name)
        validate_dataframe(df, "age_ratings", name).raise_if_invalid(name)
        return summarize_by_rating(df, self.config.chart.rating_order)

    def length_stats(self):
        name = self.config.data.merged_data
        df = self.loader.load_records(name)
        # Warnings only; summarize_by_length aborts on an incomplete first record
        validate_dataframe(df, "runtime_scores", name)
        return summarize_by_length(
            df,
            short_max=self.config.chart.short_max_runtime,
            medium_max=self.config.chart.medium_max_runtime,
            name=name,
        )

    def release_summaries(self):
        name = self.config.data.merged_data
        df = self.loader.load_records(name)
        validate_dataframe(df, "releases", name).raise_if_invalid(name)
        return summarize_releases(df)

    def vega_chart(self):
        return load_vega_chart(
            self.loader,
            self.config.data.vega_spec,
            inline_data=self.config.data.inline_spec_data,
            container_id="chart",
        )

    def build_data(self, name: str) -> Any:
        """Run the data half of a pipeline (no figure)."""
        if name not in self._builders:
            raise KeyError(f"Unknown chart: {name}. Available: {CHART_NAMES}")
        return self._builders[name]()

    def data_payload(self, name: str) -> Any:
        """JSON-safe form of build_data()."""
        data = self.build_data(name)
        if name == "chart":
            return spec_summary(data)
        return [item.to_dict() for item in data]

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _figure_html(self, name: str, data: Any) -> str:
        if name == "chart":
            return data.to_html()
        if name == "barplot":
            fig = self.plotter.create_rating_bar_chart(data)
        elif name == "boxplot":
            fig = self.plotter.create_length_box_plot(data)
        else:
            fig = self.plotter.create_release_scatter(data)
        return figure_to_html(fig, div_id=name)

    def render_chart(self, name: str) -> ChartResult:
        """
        Render one chart.

        Args:
            name: One of CHART_NAMES

        Returns:
            ChartResult; failures are captured, never raised
        """
        if name not in self._builders:
            raise KeyError(f"Unknown chart: {name}. Available: {CHART_NAMES}")

        start_time = time.perf_counter()
        result = ChartResult(name=name)
        self._stats["total_renders"] += 1

        try:
            result.data = self.build_data(name)
            result.html = self._figure_html(name, result.data)
            result.success = True
            self._stats["successful_renders"] += 1
        except Exception as e:
            result.success = False
            result.error_message = str(e)
            self._stats["failed_renders"] += 1
            logger.error(f"Chart {name} failed: {e}")

        result.computation_time_ms = (time.perf_counter() - start_time) * 1000
        self._stats["total_time_ms"] += result.computation_time_ms
        return result

    def render_all(self, names: Optional[List[str]] = None) -> List[ChartResult]:
        """Render every chart (or the given subset) in page order."""
        return [self.render_chart(name) for name in (names or CHART_NAMES)]

    def get_stats(self) -> Dict:
        return self._stats.copy()
