"""
Core enumerations for the staged-reveal graph view.

This module defines the disclosure stages, entity shapes and link styles used
throughout the simulation, scheduling and rendering code.
"""

from enum import Enum


class DisclosureState(Enum):
    """
    Stages of a reveal episode.

    An episode always moves forward through the stages:
    - CENTER_NODE: only the focus (and the anchor) are visible
    - FIRST_LEVEL: direct neighbours of the focus are being revealed
    - SECOND_LEVEL: entities adjacent to anything visible are being revealed
    - COMPLETE: the episode is over and the final selection has been made
    """

    CENTER_NODE = "centerNode"
    """Only the focus entity and the anchor are visible."""

    FIRST_LEVEL = "firstLevel"
    """Hop-1 neighbours of the focus are queued for reveal."""

    SECOND_LEVEL = "secondLevel"
    """Neighbours of the visible set are queued for reveal."""

    COMPLETE = "complete"
    """Terminal stage of the episode."""


_NEXT_STAGE = {
    DisclosureState.CENTER_NODE: DisclosureState.FIRST_LEVEL,
    DisclosureState.FIRST_LEVEL: DisclosureState.SECOND_LEVEL,
    DisclosureState.SECOND_LEVEL: DisclosureState.COMPLETE,
    DisclosureState.COMPLETE: DisclosureState.COMPLETE,
}


def next_stage(state: DisclosureState) -> DisclosureState:
    """Return the stage that follows `state`; COMPLETE maps to itself."""
    return _NEXT_STAGE[state]


class Shape(str, Enum):
    """Drawable entity shapes. Unknown tags fall back to CIRCLE."""

    CIRCLE = "circle"
    SQUARE = "square"
    TRIANGLE = "triangle"
    DIAMOND = "diamond"
    PENTAGON = "pentagon"
    HEXAGON = "hexagon"
    OCTAGON = "octagon"

    @classmethod
    def parse(cls, tag) -> "Shape":
        try:
            return cls(str(tag).lower())
        except ValueError:
            return cls.CIRCLE


class LinkStyle(str, Enum):
    """Stroke style of a link."""

    SOLID = "solid"
    DOTTED = "dotted"
    DASHED = "dashed"

    @classmethod
    def parse(cls, tag) -> "LinkStyle":
        if not tag:
            return cls.SOLID
        try:
            return cls(str(tag).lower())
        except ValueError:
            return cls.SOLID
