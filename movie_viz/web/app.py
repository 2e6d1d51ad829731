"""
Dashboard Web Application
=========================

FastAPI app serving the chart page. Datasets are re-read on every request,
so the page always reflects the files currently in the data source.
"""
import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from ..config import AppConfig, get_config
from ..orchestrator import CHART_NAMES, DashboardOrchestrator
from ..report import HTMLReportGenerator
from ..utils.exceptions import MovieVizError

logger = logging.getLogger(__name__)


def setup_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Configure and return the FastAPI application."""
    config = config or get_config()
    app = FastAPI(title=config.web.title)
    report = HTMLReportGenerator(output_dir=config.output_dir, web_config=config.web)

    data_dir = config.data_dir
    if data_dir is not None and data_dir.exists():
        app.mount("/data", StaticFiles(directory=str(data_dir)), name="data_static")

    def _orchestrator() -> DashboardOrchestrator:
        return DashboardOrchestrator(config)

    def _check_name(name: str) -> None:
        if name not in CHART_NAMES:
            raise HTTPException(status_code=404, detail=f"Unknown chart: {name}")

    @app.get("/", response_class=HTMLResponse)
    def index():
        results = _orchestrator().render_all()
        failed = [r.name for r in results if not r.success]
        if failed:
            logger.warning(f"Page rendered without: {', '.join(failed)}")
        return report.build_page(results)

    @app.get("/chart/{name}", response_class=HTMLResponse)
    def view_chart(name: str):
        _check_name(name)
        result = _orchestrator().render_chart(name)
        return report.build_page([result], title=f"{config.web.title} - {name}")

    @app.get("/api/charts")
    def list_charts():
        return {"charts": CHART_NAMES}

    @app.get("/api/{name}")
    def chart_data(name: str):
        _check_name(name)
        try:
            payload = _orchestrator().data_payload(name)
        except MovieVizError as e:
            logger.error(f"Data for {name} unavailable: {e}")
            return JSONResponse(status_code=502, content=e.to_dict())
        return {"name": name, "data": payload}

    return app


def run_app(host: Optional[str] = None, port: Optional[int] = None, config: Optional[AppConfig] = None):
    """Start the web application."""
    import uvicorn
    config = config or get_config()
    app = setup_app(config)
    uvicorn.run(
        app,
        host=host or config.web.host,
        port=port or config.web.port,
        log_level="info",
    )


if __name__ == "__main__":
    run_app()
