"""
Chart visualization module.
"""
from .plotter import MovieChartPlotter, figure_to_html, sqrt_scale
from .vega import VegaChart, inline_data_urls, load_vega_chart, spec_summary

__all__ = [
    "MovieChartPlotter",
    "figure_to_html",
    "sqrt_scale",
    "VegaChart",
    "inline_data_urls",
    "load_vega_chart",
    "spec_summary",
]
