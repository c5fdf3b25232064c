"""
Reveal Core Package.

This package contains the headless implementation of the staged-reveal graph
view, including:

- Core data structures (Graph, Entity, Link) and the data-source loader
- Force-directed physics, fades and settlement detection
- The tick-driven scheduler and the four-stage disclosure sequencer
- Concentric re-centering layout, rendering onto an abstract surface and
  gesture handling

`GraphView` ties these together behind one frame loop.
"""

__version__ = "0.1.0"

from .enums import DisclosureState, LinkStyle, Shape, next_stage
from .exceptions import DataSourceError, RevealError
from .config import SimulationConfig
from .graph import Entity, Graph, Link
from .viewport import Viewport
from .distance import adjacent_unrevealed, distances_from
from .loader import build_from_dict, load_from_file, load_from_json, load_from_yaml
from .collaborators import DetailPanel, Router, StatusIndicator, entity_url
from .render import Palette, RecordingSurface, Renderer, Surface
from .view import GraphView
