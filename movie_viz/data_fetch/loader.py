"""
Dataset loader for the chart pipeline.

Every dataset is fetched once per render, either from a local directory or
from an http(s) base URL. There is no caching and no retry: a failed fetch
or parse raises DataFetchError and the caller decides what to skip.
"""
import io
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urljoin

import pandas as pd
import requests

from ..config import DataConfig, get_config
from ..utils.exceptions import DataFetchError

logger = logging.getLogger(__name__)


class DatasetLoader:
    """Fetch and parse the CSV/JSON files behind the charts."""

    def __init__(
        self,
        config: Optional[DataConfig] = None,
        data_dir: Optional[Path] = None,
        session: Optional[requests.Session] = None,
    ):
        if config is None:
            app_config = get_config()
            config = app_config.data
            if data_dir is None:
                data_dir = app_config.data_dir
        elif data_dir is None and not config.is_remote:
            data_dir = Path(config.source)
        self.config = config
        self.data_dir = Path(data_dir) if data_dir is not None else None
        self._session = session

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def source_for(self, name: str) -> str:
        """Return the URL or path a dataset is read from."""
        if self.config.is_remote:
            base = self.config.source if self.config.source.endswith("/") else self.config.source + "/"
            return urljoin(base, name)
        return str(self.data_dir / name)

    def fetch_text(self, name: str) -> str:
        """Fetch the raw text of a dataset."""
        source = self.source_for(name)
        logger.debug(f"Fetching {name} from {source}")

        if self.config.is_remote:
            try:
                response = self.session.get(source, timeout=self.config.timeout)
                response.raise_for_status()
            except requests.exceptions.Timeout as e:
                raise DataFetchError(
                    f"Timeout after {self.config.timeout}s while fetching {name}",
                    dataset=name,
                    source=source,
                    error_code="FETCH_TIMEOUT",
                ) from e
            except requests.exceptions.RequestException as e:
                raise DataFetchError(
                    f"Failed to fetch {name}: {e}",
                    dataset=name,
                    source=source,
                ) from e
            return response.text

        path = Path(source)
        if not path.exists():
            raise DataFetchError(
                f"Dataset file not found: {path}",
                dataset=name,
                source=source,
                error_code="FETCH_NOT_FOUND",
            )
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise DataFetchError(f"Cannot read {path}: {e}", dataset=name, source=source) from e

    def load_csv(self, name: str) -> pd.DataFrame:
        """Fetch a CSV dataset into a DataFrame."""
        text = self.fetch_text(name)
        try:
            df = pd.read_csv(io.StringIO(text))
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise DataFetchError(
                f"Cannot parse {name} as CSV: {e}",
                dataset=name,
                source=self.source_for(name),
                error_code="PARSE_ERROR",
            ) from e
        logger.info(f"Loaded {name}: {len(df)} rows")
        return df

    def load_json(self, name: str) -> Any:
        """Fetch and decode a JSON dataset."""
        text = self.fetch_text(name)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise DataFetchError(
                f"Cannot parse {name} as JSON: {e}",
                dataset=name,
                source=self.source_for(name),
                error_code="PARSE_ERROR",
            ) from e

    def load_records(self, name: str) -> pd.DataFrame:
        """Fetch a JSON array of objects into a DataFrame."""
        data = self.load_json(name)
        if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
            raise DataFetchError(
                f"Dataset {name} must be a JSON array of objects",
                dataset=name,
                source=self.source_for(name),
                error_code="PARSE_ERROR",
            )
        df = pd.DataFrame.from_records(data)
        logger.info(f"Loaded {name}: {len(df)} records")
        return df

    def load_spec(self, name: str) -> Dict[str, Any]:
        """Fetch a chart spec document. Its shape is checked by the caller."""
        spec = self.load_json(name)
        logger.info(f"Loaded spec {name}")
        return spec
