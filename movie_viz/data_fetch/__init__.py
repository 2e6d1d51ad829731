"""
Data fetch module for the chart pipeline.
Loads the CSV/JSON datasets from a local directory or an http(s) base URL.
"""
from .loader import DatasetLoader

__all__ = [
    "DatasetLoader",
]
