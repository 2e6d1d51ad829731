"""
Configuration management for the movie chart dashboard.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Any
import yaml

from .utils.exceptions import ConfigurationError


@dataclass
class DataConfig:
    """Dataset location configuration."""
    # Local directory (relative to the project root) or http(s) base URL
    source: str = "data"
    age_data: str = "age_data.csv"
    merged_data: str = "merged_data.json"
    vega_spec: str = "scatterplot.json"
    timeout: int = 30
    inline_spec_data: bool = True

    @property
    def is_remote(self) -> bool:
        return self.source.startswith(("http://", "https://"))


@dataclass
class ChartConfig:
    """Chart visualization configuration."""
    theme: str = "plotly_white"
    font_family: str = "sans-serif"

    # Average score by age rating
    bar_width: int = 700
    bar_height: int = 500
    bar_margin: Dict[str, int] = field(default_factory=lambda: {
        "t": 50, "b": 50, "l": 70, "r": 70,
    })
    bar_padding: float = 0.25
    bar_colorscale: str = "RdBu"
    rating_order: List[str] = field(default_factory=lambda: [
        "TV-Y", "TV-Y7", "TV-G", "G", "TV-PG", "PG",
        "TV-14", "PG-13", "TV-MA", "R", "NC-17", "NR",
    ])

    # Score distribution by runtime category
    box_width: int = 800
    box_height: int = 500
    box_margin: Dict[str, int] = field(default_factory=lambda: {
        "t": 20, "b": 60, "l": 60, "r": 30,
    })
    box_padding: float = 0.2
    short_max_runtime: float = 90
    medium_max_runtime: float = 150

    # Releases vs rating by year
    scatter_width: int = 900
    scatter_height: int = 500
    scatter_margin: Dict[str, int] = field(default_factory=lambda: {
        "t": 50, "b": 80, "l": 60, "r": 180,
    })
    size_domain: List[float] = field(default_factory=lambda: [0, 300])
    size_range: List[float] = field(default_factory=lambda: [2, 30])
    size_legend_values: List[int] = field(default_factory=lambda: [0, 50, 100, 150, 200, 250, 300])
    year_tick_step: int = 5

    colors: Dict[str, str] = field(default_factory=lambda: {
        "bar_outline": "#000000",
        "bar_tooltip": "#fff9c4",
        "box_fill": "#247ba0",
        "box_line": "#000000",
        "outlier": "#fb3640",
        "scatter_tooltip": "lightgray",
        "size_legend": "gray",
        "MOVIE": "blue",
        "SHOW": "red",
    })


@dataclass
class WebConfig:
    """Web application configuration."""
    host: str = "0.0.0.0"
    port: int = 8080
    title: str = "Movie & TV Catalogue Charts"
    plotly_js: str = "https://cdn.plot.ly/plotly-2.35.2.min.js"
    vega_js: List[str] = field(default_factory=lambda: [
        "https://cdn.jsdelivr.net/npm/vega@5",
        "https://cdn.jsdelivr.net/npm/vega-lite@5",
        "https://cdn.jsdelivr.net/npm/vega-embed@6",
    ])


def _section(cls, data: Dict[str, Any], key: str):
    """Build one config section, rejecting unknown keys."""
    values = data.get(key) or {}
    try:
        return cls(**values)
    except TypeError as e:
        raise ConfigurationError(
            f"Invalid '{key}' section in config: {e}",
            config_key=key,
            config_value=values,
        ) from e


@dataclass
class AppConfig:
    """Main application configuration."""
    data: DataConfig = field(default_factory=DataConfig)
    chart: ChartConfig = field(default_factory=ChartConfig)
    web: WebConfig = field(default_factory=WebConfig)

    # Paths
    project_root: Path = field(default_factory=lambda: Path(__file__).parent.parent)

    @property
    def data_dir(self) -> Optional[Path]:
        """Local dataset directory, or None when datasets are fetched over HTTP."""
        if self.data.is_remote:
            return None
        path = Path(self.data.source)
        return path if path.is_absolute() else self.project_root / path

    @property
    def output_dir(self) -> Path:
        return self.project_root / "output"

    @classmethod
    def from_yaml(cls, path: Optional[Path] = None) -> "AppConfig":
        """Load configuration from YAML file."""
        if path is None:
            path = cls().project_root / "config.yaml"
        path = Path(path)

        if not path.exists():
            return cls()

        with open(path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Cannot parse {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Top level of {path} must be a mapping")

        unknown = set(data) - {"data", "chart", "web"}
        if unknown:
            raise ConfigurationError(
                f"Unknown config sections: {', '.join(sorted(unknown))}",
                config_key=sorted(unknown)[0],
            )

        return cls(
            data=_section(DataConfig, data, "data"),
            chart=_section(ChartConfig, data, "chart"),
            web=_section(WebConfig, data, "web"),
            project_root=path.parent,
        )


# Global config instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get or create global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_yaml()
    return _config


def reload_config(path: Optional[Path] = None) -> AppConfig:
    """Reload configuration from file."""
    global _config
    _config = AppConfig.from_yaml(path)
    return _config
