"""
Web application module for the chart dashboard.
"""
from .app import run_app, setup_app

__all__ = ["run_app", "setup_app"]
