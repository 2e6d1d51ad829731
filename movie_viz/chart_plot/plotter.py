"""
Plotly chart builders for the catalogue charts.

Each builder turns the summaries from ``movie_viz.analysis`` into a Plotly
figure. The browser draws the figures as SVG, with hover tooltips.
"""
import logging
import math
from typing import Dict, List, Optional, Sequence

import plotly.graph_objects as go

from ..analysis import LENGTH_CATEGORIES, BoxStats, RatingSummary, ReleaseSummary
from ..config import get_config, ChartConfig
from ..utils.exceptions import ChartRenderError

logger = logging.getLogger(__name__)


BAR_TITLE = "Average IMDb Score by Age Rating with Varying Frequency of Votes"
BOX_TITLE = "Distribution of IMDb scores by Media Length Category"
SCATTER_TITLE = "Number of Releases vs. Average Rating by Year (Movies & TV Shows)"

# Known media types, in legend order
MEDIA_TYPES = ["MOVIE", "SHOW"]


def sqrt_scale(value: float, domain: Sequence[float], range_: Sequence[float]) -> float:
    """Square-root scale: sqrt(value) mapped linearly from sqrt(domain) to range (unclamped)."""
    d0, d1 = (math.sqrt(d) for d in domain)
    r0, r1 = range_
    if d1 == d0:
        return r0
    return r0 + (math.sqrt(value) - d0) / (d1 - d0) * (r1 - r0)


def media_types_in_order(types: Sequence[str]) -> List[str]:
    """Colour domain: known types first, then the others by first appearance."""
    ordered = list(MEDIA_TYPES)
    for t in types:
        if t not in ordered:
            ordered.append(t)
    return ordered


class MovieChartPlotter:
    """
    Builds the three Plotly charts of the dashboard.

    Features:
    - Average score bars coloured by total votes (diverging RdBu scale)
    - Box plot of scores per runtime category with outlier markers
    - Bubble scatter of releases per year and media type with a size legend
    """

    def __init__(self, config: Optional[ChartConfig] = None):
        self.config = config or get_config().chart
        self.colors = self.config.colors

    def create_rating_bar_chart(self, summaries: List[RatingSummary]) -> go.Figure:
        """
        Horizontal bars of average IMDb score per age rating.

        Args:
            summaries: Rating summaries in maturity order

        Returns:
            Plotly Figure object
        """
        if not summaries:
            raise ChartRenderError("No ratings to plot", chart="barplot")

        ratings = [s.rating for s in summaries]
        votes = [s.total_votes for s in summaries]
        vote_min, vote_max = min(votes), max(votes)

        fig = go.Figure(
            go.Bar(
                orientation="h",
                x=[s.avg_score for s in summaries],
                y=ratings,
                customdata=votes,
                marker=dict(
                    color=votes,
                    colorscale=self.config.bar_colorscale,
                    cmin=vote_min,
                    cmax=vote_max,
                    line=dict(color=self.colors["bar_outline"], width=1),
                    colorbar=dict(
                        title=dict(text="Total IMDb Votes", side="top", font=dict(size=12)),
                        orientation="h",
                        thickness=10,
                        len=150 / self.config.bar_width,
                        lenmode="fraction",
                        x=1 - 105 / self.config.bar_width,
                        y=1 - 120 / self.config.bar_height,
                        yanchor="top",
                        tickformat=".2s",
                        nticks=5,
                    ),
                ),
                hoverlabel=dict(bgcolor=self.colors["bar_tooltip"], font=dict(color="black")),
                hovertemplate=(
                    "%{y}<br>"
                    "Average Score: %{x:.4f}<br>"
                    "Total Votes: %{customdata:,.0f}"
                    "<extra></extra>"
                ),
                name="Average IMDb Score",
            )
        )

        margin = self.config.bar_margin
        self._apply_layout(
            fig,
            title=BAR_TITLE,
            width=self.config.bar_width + margin["l"] + margin["r"],
            height=self.config.bar_height + margin["t"] + margin["b"],
            margin=margin,
        )
        fig.update_layout(bargap=self.config.bar_padding, showlegend=False)
        fig.update_xaxes(title_text="Average IMDb Score", range=[0, 10])
        fig.update_yaxes(
            title_text="Age Rating",
            type="category",
            categoryorder="array",
            categoryarray=ratings,
            autorange="reversed",
        )
        return fig

    def create_length_box_plot(self, stats: List[BoxStats]) -> go.Figure:
        """
        Box plot of IMDb scores per media length category.

        Whiskers reach the minimum and maximum score; scores outside the
        1.5 IQR fences are drawn as separate markers.
        """
        if not stats:
            raise ChartRenderError("No score distributions to plot", chart="boxplot")

        categories = [s.category for s in stats]
        fig = go.Figure()
        fig.add_trace(
            go.Box(
                x=categories,
                q1=[s.q1 for s in stats],
                median=[s.median for s in stats],
                q3=[s.q3 for s in stats],
                lowerfence=[s.min for s in stats],
                upperfence=[s.max for s in stats],
                fillcolor=self.colors["box_fill"],
                line=dict(color=self.colors["box_line"], width=2),
                whiskerwidth=0,
                boxpoints=False,
                name="IMDb score",
                showlegend=False,
            )
        )

        outlier_x, outlier_y, outlier_text = [], [], []
        for s in stats:
            for o in s.outliers:
                outlier_x.append(s.category)
                outlier_y.append(o.score)
                outlier_text.append(o.title or "")

        if outlier_x:
            fig.add_trace(
                go.Scatter(
                    x=outlier_x,
                    y=outlier_y,
                    text=outlier_text,
                    mode="markers",
                    marker=dict(
                        size=6,
                        color=self.colors["outlier"],
                        line=dict(color="black", width=1),
                    ),
                    hovertemplate="%{text}<br>IMDb score: %{y}<extra>outlier</extra>",
                    name="Outliers",
                    showlegend=False,
                )
            )

        margin = self.config.box_margin
        self._apply_layout(
            fig,
            title=BOX_TITLE,
            width=self.config.box_width,
            height=self.config.box_height,
            margin=margin,
        )
        fig.update_layout(boxgap=self.config.box_padding)
        fig.update_xaxes(
            title_text="Media Length Category",
            type="category",
            categoryorder="array",
            categoryarray=LENGTH_CATEGORIES,
            range=[-0.5, len(LENGTH_CATEGORIES) - 0.5],
        )
        fig.update_yaxes(title_text="IMDb score", range=[0, max(s.max for s in stats)])
        return fig

    def create_release_scatter(self, summaries: List[ReleaseSummary]) -> go.Figure:
        """
        Bubble scatter of average rating per release year and media type.

        Bubble area grows with the number of releases; colour encodes the
        media type.
        """
        if not summaries:
            raise ChartRenderError("No releases to plot", chart="scatter")

        years = sorted({s.release_year for s in summaries})
        year_labels = [str(y) for y in years]
        ratings = [s.avg_rating for s in summaries if not math.isnan(s.avg_rating)]
        if not ratings:
            raise ChartRenderError("No rated releases to plot", chart="scatter")

        fig = go.Figure()
        present = {s.type for s in summaries}
        types = media_types_in_order([s.type for s in summaries])
        for media_type in (t for t in types if t in present):
            rows = [s for s in summaries if s.type == media_type]
            fig.add_trace(
                go.Scatter(
                    x=[str(s.release_year) for s in rows],
                    y=[s.avg_rating for s in rows],
                    customdata=[[s.num_releases] for s in rows],
                    mode="markers",
                    marker=dict(
                        size=[self._bubble_diameter(s.num_releases) for s in rows],
                        sizemode="diameter",
                        color=self._type_color(media_type, types),
                        opacity=0.7,
                        line=dict(width=0),
                    ),
                    name=media_type,
                    legendgroup="type",
                    hoverlabel=dict(bgcolor=self.colors["scatter_tooltip"], font=dict(color="black")),
                    hovertemplate=(
                        "<b>Year:</b> %{x}<br>"
                        f"<b>Type:</b> {media_type}<br>"
                        "<b>Releases:</b> %{customdata[0]}<br>"
                        "<b>Avg Rating:</b> %{y:.2f}"
                        "<extra></extra>"
                    ),
                )
            )

        self._add_size_legend(fig)

        margin = self.config.scatter_margin
        self._apply_layout(
            fig,
            title=SCATTER_TITLE,
            width=self.config.scatter_width,
            height=self.config.scatter_height,
            margin=margin,
        )
        fig.update_layout(
            legend=dict(
                x=1.02,
                y=1,
                xanchor="left",
                yanchor="top",
                itemsizing="trace",
                font=dict(size=12),
                tracegroupgap=20,
            ),
        )
        fig.update_xaxes(
            title_text="Release Year",
            type="category",
            categoryorder="array",
            categoryarray=year_labels,
            # Every Nth distinct year in chronological order, not every Nth (year, type) row
            tickvals=year_labels[::self.config.year_tick_step],
            tickangle=-30,
            tickfont=dict(size=12),
        )
        fig.update_yaxes(
            title_text="Average IMDb Rating",
            range=[min(ratings) - 0.5, max(ratings) + 0.5],
        )
        return fig

    def _bubble_diameter(self, num_releases: float) -> float:
        radius = sqrt_scale(num_releases, self.config.size_domain, self.config.size_range)
        return 2 * radius

    def _type_color(self, media_type: str, types: Sequence[str]) -> str:
        """Ordinal colour: known types map directly, the rest cycle the palette."""
        if media_type in MEDIA_TYPES:
            return self.colors[media_type]
        palette = [self.colors[t] for t in MEDIA_TYPES]
        return palette[list(types).index(media_type) % len(palette)]

    def _add_size_legend(self, fig: go.Figure) -> None:
        """Legend-only grey bubbles for the reference release counts."""
        for value in self.config.size_legend_values:
            fig.add_trace(
                go.Scatter(
                    x=[None],
                    y=[None],
                    mode="markers",
                    marker=dict(
                        size=self._bubble_diameter(value),
                        sizemode="diameter",
                        color=self.colors["size_legend"],
                        opacity=0.5,
                    ),
                    name=str(value),
                    legendgroup="size",
                    legendgrouptitle_text="Releases",
                    hoverinfo="skip",
                )
            )

    def _apply_layout(
        self,
        fig: go.Figure,
        title: str,
        width: int,
        height: int,
        margin: Dict[str, int],
    ) -> None:
        """Apply chart layout settings."""
        fig.update_layout(
            title={
                "text": f"<b>{title}</b>",
                "x": 0.5,
                "xanchor": "center",
                "font": {"size": 16},
            },
            template=self.config.theme,
            width=width,
            height=height,
            margin=dict(l=margin["l"], r=margin["r"], t=margin["t"], b=margin["b"]),
            font=dict(family=self.config.font_family),
            hovermode="closest",
        )
        fig.update_xaxes(showline=True, linecolor="black", ticks="outside")
        fig.update_yaxes(showline=True, linecolor="black", ticks="outside")


def figure_to_html(fig: go.Figure, div_id: str) -> str:
    """Render a figure as an HTML fragment; plotly.js is loaded by the host page."""
    config = {
        "displayModeBar": False,
        "displaylogo": False,
        "responsive": False,
        "toImageButtonOptions": {"format": "svg"},
    }
    return fig.to_html(
        full_html=False,
        include_plotlyjs=False,
        div_id=div_id,
        config=config,
    )
