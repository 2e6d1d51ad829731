#!/usr/bin/env python3
"""
Movie chart dashboard
=====================

Renders the four catalogue charts into a static HTML page, or serves them
from a local web app.

Usage:
    python run_dashboard.py                      # write output/index.html
    python run_dashboard.py --data-dir ./data    # read datasets from another folder
    python run_dashboard.py --data-dir https://example.org/datasets/
    python run_dashboard.py --serve --port 8080  # start the web app
"""
import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

# Add the project root to the import path
sys.path.insert(0, str(Path(__file__).parent))

from movie_viz.config import reload_config
from movie_viz.orchestrator import DashboardOrchestrator
from movie_viz.report import HTMLReportGenerator
from movie_viz.utils.exceptions import MovieVizError

console = Console()
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Render the movie catalogue charts")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument("--data-dir", type=str, default=None, help="Dataset directory or http(s) base URL")
    parser.add_argument("--output", type=Path, default=None, help="Output HTML file")
    parser.add_argument("--serve", action="store_true", help="Serve the charts instead of writing a file")
    parser.add_argument("--host", type=str, default=None, help="Web app host")
    parser.add_argument("--port", type=int, default=None, help="Web app port")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def _print_summary(results) -> None:
    table = Table(title="Charts")
    table.add_column("Chart", style="cyan")
    table.add_column("Status")
    table.add_column("Time (ms)", justify="right")
    table.add_column("Error", style="dim")
    for r in results:
        status = "[green]✓ rendered[/green]" if r.success else "[red]✗ failed[/red]"
        table.add_row(r.name, status, f"{r.computation_time_ms:.1f}", r.error_message)
    console.print(table)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        config = reload_config(args.config)
    except MovieVizError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        return 2

    if args.data_dir:
        config.data.source = args.data_dir
        if not config.data.is_remote:
            config.data.source = str(Path(args.data_dir).resolve())

    if args.serve:
        from movie_viz.web import run_app
        console.print(f"[bold cyan]Serving charts on {args.host or config.web.host}:{args.port or config.web.port}[/bold cyan]")
        run_app(host=args.host, port=args.port, config=config)
        return 0

    console.print("[cyan]Rendering charts...[/cyan]")
    results = DashboardOrchestrator(config).render_all()
    _print_summary(results)

    output = args.output or config.output_dir / "index.html"
    generator = HTMLReportGenerator(output_dir=output.parent, web_config=config.web)
    try:
        path = generator.write(results, filename=output.name)
    except MovieVizError as e:
        console.print(f"[red]{e}[/red]")
        return 1
    console.print(f"[green]✓ Page written to {path}[/green]")

    return 0 if any(r.success for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
