"""
Report Module - Host page generation
"""

from .html_report import HTMLReportGenerator

__all__ = [
    "HTMLReportGenerator",
]
