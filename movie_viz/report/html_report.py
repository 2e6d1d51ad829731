"""
Host page for the catalogue charts
==================================

Assembles the chart fragments into one HTML page with a named container per
chart. Plotly and vega-embed are loaded from CDN.
"""

import html
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from ..config import WebConfig, get_config
from ..orchestrator import ChartResult
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

BACKGROUND = "#f6f7f9"
CARD_BG = "#ffffff"
BORDER = "#d0d7de"
TEXT = "#1f2328"
GRAY = "#57606a"


class HTMLReportGenerator:
    """Generate the dashboard page from rendered charts."""

    def __init__(self, output_dir: Optional[Path] = None, web_config: Optional[WebConfig] = None):
        self.web_config = web_config or get_config().web
        self.output_dir = Path(output_dir) if output_dir is not None else get_config().output_dir

    def _scripts(self) -> str:
        sources = [self.web_config.plotly_js, *self.web_config.vega_js]
        return "\n".join(f'    <script src="{src}"></script>' for src in sources)

    def _container(self, result: ChartResult) -> str:
        if result.success:
            inner = result.html
        else:
            # Empty container; the failure is only logged
            inner = f'<div id="{result.name}"></div>'
        return f'''<section class="chart-card" data-chart="{result.name}">
{inner}
</section>'''

    def build_page(self, results: List[ChartResult], title: Optional[str] = None) -> str:
        """Generate the complete page."""
        title = html.escape(title or self.web_config.title)
        generated = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        containers = "\n".join(self._container(r) for r in results)

        return f'''<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
{self._scripts()}
    <style>
        * {{ margin: 0; padding: 0; box-sizing: border-box; }}
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
            background: {BACKGROUND};
            color: {TEXT};
        }}
        .header {{
            background: {CARD_BG};
            border-bottom: 1px solid {BORDER};
            padding: 16px 24px;
        }}
        .header h1 {{ font-size: 1.4em; }}
        .header .sub {{ font-size: 0.85em; color: {GRAY}; }}
        .container {{
            max-width: 1000px;
            margin: 0 auto;
            padding: 20px;
            display: flex;
            flex-direction: column;
            gap: 20px;
        }}
        .chart-card {{
            background: {CARD_BG};
            border: 1px solid {BORDER};
            border-radius: 8px;
            padding: 12px;
            overflow-x: auto;
        }}
        .footer {{ text-align: center; padding: 20px; color: {GRAY}; font-size: 0.85em; }}
    </style>
</head>
<body>
<div class="header">
    <h1>{title}</h1>
    <span class="sub">Generated {generated}</span>
</div>
<div class="container">
{containers}
</div>
<div class="footer">Charts rendered with Plotly and Vega-Lite</div>
</body>
</html>'''

    def write(self, results: List[ChartResult], filename: str = "index.html") -> Path:
        """Save the page to the output directory."""
        page = self.build_page(results)
        report_path = self.output_dir / filename
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            with open(report_path, "w", encoding="utf-8") as f:
                f.write(page)
        except OSError as e:
            raise ReportGenerationError(
                f"Cannot write report: {e}",
                output_path=str(report_path),
            ) from e

        logger.info(f"Report generated: {report_path}")
        return report_path
