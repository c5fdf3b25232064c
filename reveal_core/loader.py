"""
Graph loader for the data-source contract.

The source is a single document (JSON or YAML) shaped like:

center:                       # the anchor entity
  id: me
  name: Jane Doe
  shape: circle
  subtitle: Engineer
  description: "..."
nodes:
  - id: acme
    name: Acme Corp
    shape: square
    url: /work/acme           # optional explicit url
connections:
  - source: me
    target: acme
    value: 3                  # optional weight, integer >= 1
    type: dotted              # optional link style
    label: worked at          # optional
visualSettings:               # optional
  colors: {person: "#4299e1", square: "#48bb78", default: "#ed8936"}
  nodeSize: {person: 12, default: 8}

Notes:
- Connections naming an unknown endpoint are dropped.
- Weights that do not parse as an integer, or are below 1, become 1.
- Anything else malformed raises `DataSourceError`; no partial graph is built.
"""

from __future__ import annotations

import json
import logging
import math
import random
from pathlib import Path
from typing import Any, Mapping

import yaml

from .config import SimulationConfig
from .enums import LinkStyle
from .exceptions import DataSourceError
from .graph import Entity, Graph, Link
from .viewport import Viewport

logger = logging.getLogger(__name__)


def parse_weight(value: Any) -> int:
    """Integer-parse a connection weight, falling back to 1."""
    if isinstance(value, bool):
        return 1
    try:
        weight = int(value)
    except (TypeError, ValueError):
        try:
            weight = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return 1
    return weight if weight >= 1 else 1


def _record(raw: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping) or not raw.get("id"):
        raise DataSourceError(f"{what} record without an id: {raw!r}")
    return raw


def _mapping(value: Any, what: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise DataSourceError(f"{what} must be a mapping, got {type(value).__name__}")
    return value


def _sequence(value: Any, what: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DataSourceError(f"{what} must be a list, got {type(value).__name__}")
    return value


def _size(sizes: Mapping[str, Any], key: str, default: float) -> float:
    raw = sizes.get(key)
    if not raw:
        return default
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise DataSourceError(f"nodeSize.{key} is not a number: {raw!r}") from exc


def _entity_from_record(raw: Mapping[str, Any]) -> Entity:
    return Entity(
        id=str(raw["id"]),
        name=str(raw.get("name") or raw["id"]),
        category=str(raw.get("shape") or "circle"),
        subtitle=str(raw.get("subtitle") or ""),
        description=str(raw.get("description") or ""),
        url=raw.get("url") or None,
    )


def build_from_dict(
    data: Any,
    viewport: Viewport | None = None,
    config: SimulationConfig | None = None,
    rng: random.Random | None = None,
) -> Graph:
    """
    Build a `Graph` from a parsed data-source document.

    The anchor is placed near the logical centre with a small random offset;
    every other entity starts on the initial ring.

    Raises:
        DataSourceError: If the document is not a mapping, lacks a centre
            record, holds entity records without ids, or has sections of
            the wrong shape (visual settings that are not mappings, sizes
            that are not numbers, nodes or connections that are not lists)
    """
    config = config or SimulationConfig()
    viewport = viewport or Viewport(config=config)
    rng = rng or random.Random()

    if not isinstance(data, Mapping):
        raise DataSourceError("graph data must be a mapping")
    if "center" not in data:
        raise DataSourceError("graph data has no 'center' record")

    settings = _mapping(data.get("visualSettings"), "visualSettings")
    colors = _mapping(settings.get("colors"), "visualSettings.colors")
    sizes = _mapping(settings.get("nodeSize"), "visualSettings.nodeSize")
    nodes = _sequence(data.get("nodes"), "nodes")
    connections = _sequence(data.get("connections"), "connections")
    multiplier = viewport.size_multiplier
    cx, cy = viewport.center

    center_raw = _record(data["center"], "center")
    anchor = _entity_from_record(center_raw)
    anchor.radius = _size(sizes, "person", config.node_radius) * multiplier
    anchor.color = colors.get("person") or config.anchor_color
    anchor.mass = config.anchor_mass
    offset = config.random_position_offset
    anchor.x = cx + (rng.random() - 0.5) * offset
    anchor.y = cy + (rng.random() - 0.5) * offset

    graph = Graph(anchor_id=anchor.id)
    graph.add_entity(anchor)

    others = []
    for raw in nodes:
        record = _record(raw, "node")
        entity = _entity_from_record(record)
        if entity.id in graph:
            logger.warning("duplicate entity id %s ignored", entity.id)
            continue
        entity.radius = _size(sizes, "default", config.node_radius) * multiplier
        entity.color = colors.get(entity.category) or colors.get("default") or config.default_color
        entity.mass = config.default_mass
        graph.add_entity(entity)
        others.append(entity)

    for i, entity in enumerate(others):
        angle = 2 * math.pi * i / len(others)
        entity.x = cx + config.initial_radius * math.cos(angle)
        entity.y = cy + config.initial_radius * math.sin(angle)

    for raw in connections:
        if not isinstance(raw, Mapping):
            logger.debug("dropping malformed connection %r", raw)
            continue
        source = None if raw.get("source") is None else str(raw["source"])
        target = None if raw.get("target") is None else str(raw["target"])
        if source not in graph or target not in graph:
            logger.debug("dropping connection %s -> %s: unknown endpoint", source, target)
            continue
        graph.add_link(
            Link(
                source=source,
                target=target,
                weight=parse_weight(raw.get("value", raw.get("weight", 1))),
                style=LinkStyle.parse(raw.get("type")),
                label=str(raw.get("label") or ""),
            )
        )

    logger.info("loaded %d entities and %d links", len(graph), len(graph.links))
    return graph


def load_from_json(text: str, **kwargs) -> Graph:
    """Build a graph from JSON text."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DataSourceError(f"invalid JSON graph data: {exc}") from exc
    return build_from_dict(data, **kwargs)


def load_from_yaml(text: str, **kwargs) -> Graph:
    """Build a graph from YAML text."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DataSourceError(f"invalid YAML graph data: {exc}") from exc
    return build_from_dict(data, **kwargs)


def load_from_file(path: str, **kwargs) -> Graph:
    """Build a graph from a `.json`, `.yaml` or `.yml` file."""
    p = Path(path)
    try:
        with open(p, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as exc:
        raise DataSourceError(f"cannot read graph data from {path}: {exc}") from exc
    if p.suffix.lower() in (".yaml", ".yml"):
        return load_from_yaml(text, **kwargs)
    return load_from_json(text, **kwargs)

