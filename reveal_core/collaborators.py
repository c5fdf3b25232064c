"""
Interfaces of the external collaborators the view calls out to.

The defaults do nothing, so a headless view needs no wiring. Detail-panel
content, URL handling and the loading indicator's presentation all live
outside the core.
"""

from __future__ import annotations

from typing import Optional

from .graph import Entity


class DetailPanel:
    """Receives section lifecycle calls keyed by entity id."""

    def ensure_section(self, entity_id: str, expand: bool = False) -> None:
        pass

    def remove_section(self, entity_id: str) -> None:
        pass

    def expand_section(self, entity_id: str) -> None:
        pass


class Router:
    """Told about every user-visible selection so it can reflect it (address bar)."""

    def on_select(self, entity_id: str, url: str) -> None:
        pass


class StatusIndicator:
    """Loading / error indicator."""

    def update(self, message: str) -> None:
        pass

    def dismiss(self) -> None:
        pass

    def error(self, message: str) -> None:
        pass


def entity_url(entity: Entity, anchor_id: Optional[str]) -> str:
    """Explicit url if the record has one, `/` for the anchor, else `/nodes/<id>`."""
    if entity.url:
        return entity.url
    if entity.id == anchor_id:
        return "/"
    return f"/nodes/{entity.id}"
