"""
Pipeline Tests
==============

Tests for dataset loading, the orchestrator, the host page, the web app,
configuration, validation and the CLI.
"""
import asyncio
import json
import sys
from pathlib import Path

import pandas as pd
import pytest
import requests
import yaml

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from movie_viz.config import AppConfig, DataConfig, WebConfig
from movie_viz.data_fetch import DatasetLoader
from movie_viz.orchestrator import CHART_NAMES, ChartResult, DashboardOrchestrator
from movie_viz.report import HTMLReportGenerator
from movie_viz.utils.exceptions import (
    ChartRenderError,
    ConfigurationError,
    DataFetchError,
    DataValidationError,
    ErrorCategory,
    MovieVizError,
    ReportGenerationError,
    create_missing_columns_error,
)
from movie_viz.utils.validation import DataValidator

DATA_DIR = Path(__file__).parent.parent / "data"

RATING_ORDER = [
    "TV-Y", "TV-Y7", "TV-G", "G", "TV-PG", "PG",
    "TV-14", "PG-13", "TV-MA", "R", "NC-17", "NR",
]


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def app_config(tmp_path):
    """Config reading the bundled sample datasets, writing into tmp_path."""
    return AppConfig(data=DataConfig(source=str(DATA_DIR)), project_root=tmp_path)


@pytest.fixture
def data_copy(tmp_path):
    """Writable copy of the sample datasets."""
    target = tmp_path / "data"
    target.mkdir()
    for path in DATA_DIR.iterdir():
        (target / path.name).write_text(path.read_text(encoding="utf-8"), encoding="utf-8")
    return target


class FakeResponse:
    def __init__(self, text, status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """requests.Session stand-in keyed by URL."""

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        response = self.responses.get(url)
        if isinstance(response, Exception):
            raise response
        if response is None:
            return FakeResponse("", status_code=404)
        return response


# ============================================================================
# Loader Tests
# ============================================================================

class TestDatasetLoader:
    """Test local and remote dataset fetching."""

    @pytest.fixture
    def loader(self):
        return DatasetLoader(DataConfig(source=str(DATA_DIR)))

    def test_load_csv(self, loader):
        df = loader.load_csv("age_data.csv")

        assert isinstance(df, pd.DataFrame)
        assert len(df) == 18
        assert {"rating", "imdb_score", "imdb_votes"} <= set(df.columns)

    def test_load_records(self, loader):
        df = loader.load_records("merged_data.json")

        assert len(df) == 18
        assert {"runtime", "release_year", "type"} <= set(df.columns)

    def test_load_spec(self, loader):
        spec = loader.load_spec("scatterplot.json")
        assert spec["data"]["url"] == "merged_data.json"

    def test_missing_file(self, loader):
        with pytest.raises(DataFetchError) as exc_info:
            loader.load_csv("nope.csv")

        assert exc_info.value.error_code == "FETCH_NOT_FOUND"
        assert exc_info.value.dataset == "nope.csv"

    def test_invalid_json(self, tmp_path):
        (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
        loader = DatasetLoader(DataConfig(source=str(tmp_path)))

        with pytest.raises(DataFetchError) as exc_info:
            loader.load_json("broken.json")
        assert exc_info.value.error_code == "PARSE_ERROR"

    def test_records_must_be_array_of_objects(self, tmp_path):
        (tmp_path / "object.json").write_text('{"a": 1}', encoding="utf-8")
        loader = DatasetLoader(DataConfig(source=str(tmp_path)))

        with pytest.raises(DataFetchError) as exc_info:
            loader.load_records("object.json")
        assert exc_info.value.error_code == "PARSE_ERROR"

    def test_empty_csv(self, tmp_path):
        (tmp_path / "empty.csv").write_text("", encoding="utf-8")
        loader = DatasetLoader(DataConfig(source=str(tmp_path)))

        with pytest.raises(DataFetchError):
            loader.load_csv("empty.csv")

    def test_remote_source(self):
        session = FakeSession({
            "https://example.org/datasets/age_data.csv": FakeResponse("rating,imdb_score,imdb_votes\nPG,6.0,10\n"),
        })
        loader = DatasetLoader(
            DataConfig(source="https://example.org/datasets", timeout=5),
            session=session,
        )

        df = loader.load_csv("age_data.csv")

        assert list(df["rating"]) == ["PG"]
        assert session.calls == [("https://example.org/datasets/age_data.csv", 5)]
        assert loader.data_dir is None

    def test_remote_http_error(self):
        loader = DatasetLoader(DataConfig(source="https://example.org/"), session=FakeSession({}))

        with pytest.raises(DataFetchError) as exc_info:
            loader.fetch_text("merged_data.json")
        assert exc_info.value.error_code == "FETCH_ERROR"
        assert exc_info.value.source == "https://example.org/merged_data.json"

    def test_remote_timeout(self):
        session = FakeSession({"https://example.org/a.json": requests.exceptions.Timeout("slow")})
        loader = DatasetLoader(DataConfig(source="https://example.org/"), session=session)

        with pytest.raises(DataFetchError) as exc_info:
            loader.fetch_text("a.json")
        assert exc_info.value.error_code == "FETCH_TIMEOUT"


# ============================================================================
# Orchestrator Tests
# ============================================================================

class TestDashboardOrchestrator:
    """Test the four chart pipelines."""

    def test_render_all(self, app_config):
        orchestrator = DashboardOrchestrator(app_config)
        results = orchestrator.render_all()

        assert [r.name for r in results] == CHART_NAMES
        assert all(r.success for r in results), [r.error_message for r in results]
        assert all(r.html for r in results)

    def test_bar_data_in_maturity_order(self, app_config):
        summaries = DashboardOrchestrator(app_config).build_data("barplot")
        ratings = [s.rating for s in summaries]

        assert ratings == [r for r in RATING_ORDER if r in ratings]
        assert len(ratings) == 12

    def test_unparseable_votes_are_ignored(self, app_config):
        summaries = DashboardOrchestrator(app_config).build_data("barplot")
        unrated = {s.rating: s for s in summaries}["NR"]

        assert unrated.total_votes == 0
        assert unrated.avg_score == pytest.approx(5.2)

    def test_box_data(self, app_config):
        stats = DashboardOrchestrator(app_config).build_data("boxplot")
        categories = [s.category for s in stats]

        assert categories == [c for c in ["Short", "Medium", "Long"] if c in categories]
        assert sum(s.count for s in stats) == 18

    def test_scatter_data_sorted_by_year(self, app_config):
        summaries = DashboardOrchestrator(app_config).build_data("scatter")
        years = [s.release_year for s in summaries]

        assert years == sorted(years)
        assert sum(s.num_releases for s in summaries) == 18

    def test_vega_data_inlined(self, app_config):
        chart = DashboardOrchestrator(app_config).build_data("chart")

        assert "url" not in chart.spec["data"]
        assert len(chart.spec["data"]["values"]) == 18

    def test_vega_data_url_kept_when_inlining_disabled(self, app_config):
        app_config.data.inline_spec_data = False
        chart = DashboardOrchestrator(app_config).build_data("chart")

        assert chart.spec["data"] == {"url": "merged_data.json"}

    def test_failing_chart_does_not_stop_others(self, data_copy, tmp_path):
        """A dataset without a required column only fails its own chart."""
        (data_copy / "age_data.csv").write_text("title,imdb_score\nA,5.0\n", encoding="utf-8")
        config = AppConfig(data=DataConfig(source=str(data_copy)), project_root=tmp_path)

        orchestrator = DashboardOrchestrator(config)
        results = {r.name: r for r in orchestrator.render_all()}

        assert not results["barplot"].success
        assert "does not have required columns" in results["barplot"].error_message
        assert results["boxplot"].success
        assert results["scatter"].success
        assert results["chart"].success

        stats = orchestrator.get_stats()
        assert stats["total_renders"] == 4
        assert stats["failed_renders"] == 1

    def test_missing_runtime_aborts_box_plot(self, data_copy, tmp_path):
        records = json.loads((data_copy / "merged_data.json").read_text(encoding="utf-8"))
        del records[0]["runtime"]
        (data_copy / "merged_data.json").write_text(json.dumps(records), encoding="utf-8")
        config = AppConfig(data=DataConfig(source=str(data_copy)), project_root=tmp_path)

        result = DashboardOrchestrator(config).render_chart("boxplot")

        assert not result.success
        assert "runtime" in result.error_message

    def test_missing_dataset(self, tmp_path):
        config = AppConfig(data=DataConfig(source=str(tmp_path)), project_root=tmp_path)
        results = DashboardOrchestrator(config).render_all()

        assert not any(r.success for r in results)
        assert all("FETCH_NOT_FOUND" in r.error_message for r in results)

    def test_bar_chart_with_mostly_blank_votes(self, data_copy, tmp_path):
        """Blank votes are ignored by the sum; the chart still renders."""
        (data_copy / "age_data.csv").write_text(
            "rating,imdb_score,imdb_votes\nR,7,\nR,8,\nPG,6,100\n", encoding="utf-8"
        )
        config = AppConfig(data=DataConfig(source=str(data_copy)), project_root=tmp_path)

        result = DashboardOrchestrator(config).render_chart("barplot")

        assert result.success, result.error_message
        summaries = {s.rating: s for s in result.data}
        assert [s.rating for s in result.data] == ["PG", "R"]
        assert summaries["R"].avg_score == pytest.approx(7.5)
        assert summaries["R"].total_votes == 0
        assert summaries["PG"].avg_score == pytest.approx(6.0)
        assert summaries["PG"].total_votes == 100

    def test_bar_chart_without_votes_column(self, data_copy, tmp_path):
        (data_copy / "age_data.csv").write_text("rating,imdb_score\nR,7\nPG,6\n", encoding="utf-8")
        config = AppConfig(data=DataConfig(source=str(data_copy)), project_root=tmp_path)

        result = DashboardOrchestrator(config).render_chart("barplot")

        assert result.success, result.error_message
        assert [s.total_votes for s in result.data] == [0, 0]

    def test_scatter_with_mostly_blank_scores(self, data_copy, tmp_path):
        records = [
            {"title": "a", "type": "MOVIE", "release_year": 2000, "runtime": 90, "imdb_score": ""},
            {"title": "b", "type": "MOVIE", "release_year": 2000, "runtime": 95, "imdb_score": ""},
            {"title": "c", "type": "SHOW", "release_year": 2001, "runtime": 40, "imdb_score": 7.0},
        ]
        (data_copy / "merged_data.json").write_text(json.dumps(records), encoding="utf-8")
        config = AppConfig(data=DataConfig(source=str(data_copy)), project_root=tmp_path)

        result = DashboardOrchestrator(config).render_chart("scatter")

        assert result.success, result.error_message
        movies, shows = result.data
        assert movies.num_releases == 2
        assert movies.to_dict()["avg_rating"] is None
        assert shows.avg_rating == pytest.approx(7.0)

    def test_box_plot_aborts_on_zero_runtime(self, data_copy, tmp_path):
        records = json.loads((data_copy / "merged_data.json").read_text(encoding="utf-8"))
        records[0]["runtime"] = 0
        (data_copy / "merged_data.json").write_text(json.dumps(records), encoding="utf-8")
        config = AppConfig(data=DataConfig(source=str(data_copy)), project_root=tmp_path)

        results = {r.name: r for r in DashboardOrchestrator(config).render_all()}

        assert not results["boxplot"].success
        assert "MISSING_COLUMNS" in results["boxplot"].error_message
        assert results["scatter"].success

    def test_unknown_chart(self, app_config):
        orchestrator = DashboardOrchestrator(app_config)
        with pytest.raises(KeyError):
            orchestrator.render_chart("pie")
        with pytest.raises(KeyError):
            orchestrator.build_data("pie")

    def test_data_payload_is_json_safe(self, app_config):
        orchestrator = DashboardOrchestrator(app_config)
        for name in CHART_NAMES:
            json.dumps(orchestrator.data_payload(name))

    def test_result_to_dict(self):
        result = ChartResult(name="barplot", success=False, error_message="boom")
        d = result.to_dict()

        assert d["name"] == "barplot"
        assert d["success"] is False
        assert d["error_message"] == "boom"


# ============================================================================
# Report Tests
# ============================================================================

class TestHTMLReport:
    """Test the host page."""

    @pytest.fixture
    def generator(self, tmp_path):
        return HTMLReportGenerator(output_dir=tmp_path / "output", web_config=WebConfig())

    def test_page_has_a_container_per_chart(self, generator):
        results = [ChartResult(name=n, html=f'<div id="{n}">x</div>') for n in CHART_NAMES]
        page = generator.build_page(results)

        for name in CHART_NAMES:
            assert f'data-chart="{name}"' in page
            assert f'<div id="{name}">x</div>' in page

    def test_page_loads_libraries(self, generator):
        page = generator.build_page([])

        assert "cdn.plot.ly" in page
        assert "vega-embed" in page

    def test_failed_chart_leaves_empty_container(self, generator):
        page = generator.build_page([
            ChartResult(name="barplot", success=False, error_message="missing column"),
        ])

        assert '<div id="barplot"></div>' in page
        assert "missing column" not in page

    def test_title_escaped(self, generator):
        page = generator.build_page([], title="Movies & <Shows>")
        assert "Movies &amp; &lt;Shows&gt;" in page

    def test_write(self, generator):
        path = generator.write([ChartResult(name="chart", html="<p>ok</p>")])

        assert path.exists()
        assert "<p>ok</p>" in path.read_text(encoding="utf-8")

    def test_write_failure(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        generator = HTMLReportGenerator(output_dir=blocker / "sub", web_config=WebConfig())

        with pytest.raises(ReportGenerationError):
            generator.write([])


# ============================================================================
# Web App Tests
# ============================================================================

class TestWebApp:
    """Test the FastAPI routes."""

    @pytest.fixture
    def client(self, app_config):
        from fastapi.testclient import TestClient
        from movie_viz.web import setup_app
        return TestClient(setup_app(app_config))

    def test_routes_run_in_threadpool(self, app_config):
        """Blocking dataset reads must not run on the event loop."""
        from fastapi.routing import APIRoute
        from movie_viz.web import setup_app

        routes = [r for r in setup_app(app_config).routes if isinstance(r, APIRoute)]
        assert len(routes) == 4
        assert not any(asyncio.iscoroutinefunction(r.endpoint) for r in routes)

    def test_index(self, client):
        response = client.get("/")

        assert response.status_code == 200
        for name in CHART_NAMES:
            assert f'data-chart="{name}"' in response.text

    def test_single_chart_page(self, client):
        response = client.get("/chart/boxplot")

        assert response.status_code == 200
        assert 'data-chart="boxplot"' in response.text
        assert 'data-chart="barplot"' not in response.text

    def test_unknown_chart_page(self, client):
        assert client.get("/chart/pie").status_code == 404

    def test_chart_list(self, client):
        assert client.get("/api/charts").json() == {"charts": CHART_NAMES}

    def test_chart_data(self, client):
        body = client.get("/api/barplot").json()

        assert body["name"] == "barplot"
        assert body["data"][0]["rating"] == "TV-Y"

    def test_spec_data(self, client):
        body = client.get("/api/chart").json()
        assert body["data"]["schema"].startswith("https://vega.github.io/schema/vega-lite")

    def test_unknown_chart_data(self, client):
        assert client.get("/api/pie").status_code == 404

    def test_static_datasets(self, client):
        response = client.get("/data/age_data.csv")

        assert response.status_code == 200
        assert response.text.startswith("title,type,rating")

    def test_data_error(self, tmp_path):
        from fastapi.testclient import TestClient
        from movie_viz.web import setup_app

        config = AppConfig(data=DataConfig(source=str(tmp_path)), project_root=tmp_path)
        response = TestClient(setup_app(config)).get("/api/scatter")

        assert response.status_code == 502
        body = response.json()
        assert body["error_code"] == "FETCH_NOT_FOUND"
        assert body["severity"] == "medium"
        assert body["recoverable"] is True


# ============================================================================
# Config Tests
# ============================================================================

class TestConfig:
    """Test YAML configuration loading."""

    def write_config(self, tmp_path, data):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    def test_missing_file_gives_defaults(self, tmp_path):
        config = AppConfig.from_yaml(tmp_path / "absent.yaml")

        assert config.data.source == "data"
        assert config.chart.short_max_runtime == 90
        assert config.chart.medium_max_runtime == 150
        assert config.web.port == 8080

    def test_sections_loaded(self, tmp_path):
        path = self.write_config(tmp_path, {
            "data": {"source": "datasets", "timeout": 5},
            "chart": {"year_tick_step": 2},
        })
        config = AppConfig.from_yaml(path)

        assert config.data.timeout == 5
        assert config.chart.year_tick_step == 2
        assert config.data_dir == tmp_path / "datasets"
        assert config.output_dir == tmp_path / "output"

    def test_remote_source_has_no_data_dir(self, tmp_path):
        path = self.write_config(tmp_path, {"data": {"source": "https://example.org/data/"}})
        config = AppConfig.from_yaml(path)

        assert config.data.is_remote
        assert config.data_dir is None

    def test_unknown_section(self, tmp_path):
        path = self.write_config(tmp_path, {"colours": {}})
        with pytest.raises(ConfigurationError):
            AppConfig.from_yaml(path)

    def test_unknown_key(self, tmp_path):
        path = self.write_config(tmp_path, {"chart": {"bar_wdth": 10}})
        with pytest.raises(ConfigurationError) as exc_info:
            AppConfig.from_yaml(path)
        assert exc_info.value.context["config_key"] == "chart"

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            AppConfig.from_yaml(path)

    def test_bundled_config(self):
        config = AppConfig.from_yaml(Path(__file__).parent.parent / "config.yaml")
        assert config.data_dir == DATA_DIR


# ============================================================================
# Validation Tests
# ============================================================================

class TestValidation:
    """Test dataset and spec validation."""

    def test_valid_dataset(self):
        df = pd.DataFrame({"rating": ["PG"], "imdb_score": [6.0], "imdb_votes": [10]})
        result = DataValidator().validate_dataframe(df, "age_ratings", "age_data.csv")

        assert result.is_valid
        assert result.metadata["rows"] == 1

    def test_missing_grouping_column(self):
        df = pd.DataFrame({"imdb_score": [6.0], "imdb_votes": [10]})
        result = DataValidator().validate_dataframe(df, "age_ratings", "age_data.csv")

        assert not result.is_valid
        assert result.metadata["missing_columns"] == ["rating"]
        with pytest.raises(DataValidationError) as exc_info:
            result.raise_if_invalid("age_data.csv")
        assert exc_info.value.error_code == "MISSING_COLUMNS"

    def test_missing_numeric_column_warns(self):
        """An absent score or vote column is treated as empty."""
        df = pd.DataFrame({"rating": ["PG"], "imdb_score": [6.0]})
        result = DataValidator().validate_dataframe(df, "age_ratings", "age_data.csv")

        assert result.is_valid
        assert result.metadata["imdb_votes_nan"] == 1
        assert any("imdb_votes" in w for w in result.warnings)

    def test_some_non_numeric_values_warn(self):
        df = pd.DataFrame({"rating": ["PG", "R"], "imdb_score": [6.0, 7.0], "imdb_votes": [10, ""]})
        result = DataValidator().validate_dataframe(df, "age_ratings")

        assert result.is_valid
        assert result.warnings

    def test_mostly_non_numeric_values_warn(self):
        df = pd.DataFrame({"rating": ["PG", "R", "G"], "imdb_score": ["x", "y", 1], "imdb_votes": [1, 2, 3]})
        result = DataValidator().validate_dataframe(df, "age_ratings")

        assert result.is_valid
        assert result.metadata["imdb_score_nan"] == 2

    @pytest.mark.parametrize("value", [None, float("nan"), "", 0])
    def test_blank_first_record(self, value):
        """Null, empty and zero values all fail the first-record check."""
        df = pd.DataFrame([{"runtime": value, "imdb_score": 7.0}, {"runtime": 90, "imdb_score": 6.0}])
        result = DataValidator().validate_first_record(df, ["runtime", "imdb_score"], "merged_data.json")

        assert not result.is_valid
        assert result.metadata["missing_columns"] == ["runtime"]

    def test_empty_dataset(self):
        result = DataValidator().validate_dataframe(pd.DataFrame(), "releases")
        assert not result.is_valid

    def test_unknown_data_type(self):
        with pytest.raises(ValueError):
            DataValidator().validate_dataframe(pd.DataFrame({"a": [1]}), "pie")

    def test_vega_spec_checks(self):
        validator = DataValidator()

        assert validator.validate_vega_spec({"mark": "bar"}).warnings
        assert not validator.validate_vega_spec({"data": {}}).is_valid
        assert not validator.validate_vega_spec("mark").is_valid
        assert validator.validate_vega_spec({
            "$schema": "https://vega.github.io/schema/vega-lite/v5.json",
            "layer": [],
        }).is_valid


# ============================================================================
# Exception Tests
# ============================================================================

class TestExceptions:
    """Test the error hierarchy."""

    def test_to_dict(self):
        error = DataFetchError("boom", dataset="age_data.csv", source="/tmp/age_data.csv")
        d = error.to_dict()

        assert d["error_code"] == "FETCH_ERROR"
        assert d["category"] == ErrorCategory.NETWORK.value
        assert d["context"] == {"dataset": "age_data.csv", "source": "/tmp/age_data.csv"}
        assert d["recoverable"] is True

    def test_str_includes_code(self):
        assert str(ChartRenderError("empty", chart="scatter")) == "[RENDER_SCATTER] empty"

    def test_missing_columns_message(self):
        error = create_missing_columns_error("age_data.csv", ["rating", "imdb_votes"])

        assert isinstance(error, MovieVizError)
        assert str(error) == (
            "[MISSING_COLUMNS] Dataset age_data.csv does not have required columns: "
            "'rating', 'imdb_votes'"
        )
        assert not error.recoverable


# ============================================================================
# CLI Tests
# ============================================================================

class TestCLI:
    """Test the run_dashboard entry point."""

    def test_writes_page(self, tmp_path):
        import run_dashboard

        output = tmp_path / "page.html"
        code = run_dashboard.main([
            "--config", str(tmp_path / "absent.yaml"),
            "--data-dir", str(DATA_DIR),
            "--output", str(output),
        ])

        assert code == 0
        page = output.read_text(encoding="utf-8")
        for name in CHART_NAMES:
            assert f'data-chart="{name}"' in page

    def test_all_charts_failing(self, tmp_path):
        import run_dashboard

        code = run_dashboard.main([
            "--config", str(tmp_path / "absent.yaml"),
            "--data-dir", str(tmp_path),
            "--output", str(tmp_path / "page.html"),
        ])
        assert code == 1

    def test_bad_config(self, tmp_path):
        import run_dashboard

        path = tmp_path / "config.yaml"
        path.write_text("unknown: {}\n", encoding="utf-8")
        assert run_dashboard.main(["--config", str(path)]) == 2


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
