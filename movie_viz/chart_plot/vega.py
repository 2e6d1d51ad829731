"""
Spec-driven chart: a Vega-Lite document rendered by vega-embed.

Nothing here draws anything. The spec is validated, optionally made
self-contained, and handed to ``vegaEmbed`` in the browser.
"""
import copy
import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from ..data_fetch import DatasetLoader
from ..utils.exceptions import DataFetchError
from ..utils.validation import validate_vega_spec

logger = logging.getLogger(__name__)


def _is_relative_url(url: str) -> bool:
    parsed = urlparse(url)
    return not parsed.scheme and not parsed.netloc and not url.startswith("/")


class VegaChart:
    """A validated Vega-Lite spec bound to a page container."""

    def __init__(self, spec: Dict[str, Any], container_id: str = "chart", name: str = "scatterplot.json"):
        result = validate_vega_spec(spec, name)
        result.raise_if_invalid(name)
        self.spec = spec
        self.container_id = container_id
        self.name = name

    @classmethod
    def from_loader(
        cls,
        loader: DatasetLoader,
        name: str,
        container_id: str = "chart",
        inline_data: bool = True,
    ) -> "VegaChart":
        """Load a spec through the loader, inlining relative data URLs when asked."""
        spec = loader.load_spec(name)
        if inline_data and isinstance(spec, dict):
            spec = inline_data_urls(spec, loader)
        return cls(spec, container_id=container_id, name=name)

    def to_json(self) -> str:
        # "</" must not appear verbatim inside a <script> block
        return json.dumps(self.spec, ensure_ascii=False).replace("</", "<\\/")

    def to_html(self) -> str:
        """HTML fragment embedding the spec; vega-embed is loaded by the host page."""
        return (
            f'<div id="{self.container_id}"></div>\n'
            "<script type=\"text/javascript\">\n"
            f"vegaEmbed(\"#{self.container_id}\", {self.to_json()})"
            ".catch(console.error);\n"
            "</script>"
        )


def inline_data_urls(spec: Dict[str, Any], loader: DatasetLoader) -> Dict[str, Any]:
    """
    Replace relative ``data.url`` references with inline ``values``.

    The host page may live somewhere the relative URL does not resolve, so
    JSON datasets the loader can reach are embedded. References that cannot
    be loaded are left untouched for vega-embed to resolve.
    """
    spec = copy.deepcopy(spec)
    _inline(spec, loader)
    return spec


def _inline(node: Any, loader: DatasetLoader) -> None:
    if isinstance(node, list):
        for item in node:
            _inline(item, loader)
        return
    if not isinstance(node, dict):
        return

    data = node.get("data")
    if isinstance(data, dict) and isinstance(data.get("url"), str):
        url = data["url"]
        fmt = (data.get("format") or {}).get("type")
        if _is_relative_url(url) and (fmt == "json" or (fmt is None and url.endswith(".json"))):
            try:
                values = loader.load_json(url)
            except DataFetchError as e:
                logger.warning(f"Leaving data url {url} for the browser to fetch: {e}")
            else:
                inlined = {k: v for k, v in data.items() if k != "url"}
                inlined["values"] = values
                node["data"] = inlined
                logger.debug(f"Inlined {url} into spec")

    for key, value in node.items():
        if key != "data":
            _inline(value, loader)


def load_vega_chart(
    loader: DatasetLoader,
    name: str,
    inline_data: bool = True,
    container_id: str = "chart",
) -> VegaChart:
    """Load and validate the spec-driven chart."""
    chart = VegaChart.from_loader(loader, name, container_id=container_id, inline_data=inline_data)
    logger.info(f"Spec {name} ready for vega-embed ({chart.spec.get('$schema', 'no $schema')})")
    return chart


def spec_summary(chart: VegaChart) -> Dict[str, Optional[Any]]:
    """Short JSON-safe description of a spec (for the API)."""
    spec = chart.spec
    return {
        "name": chart.name,
        "schema": spec.get("$schema"),
        "title": spec.get("title"),
        "mark": spec.get("mark"),
        "spec": spec,
    }
