"""
Streamlit viewer for the staged-reveal graph.

Loads a graph data file, plays the reveal episode frame by frame and draws
each frame through the matplotlib surface. Users can:
- Step or play the simulation at a chosen speed
- Select a focus entity (the same path a click takes)
- Toggle show-all mode and replay the reveal
- Read the detail sections the view has opened
"""

import os
import sys

# Add project root to Python path BEFORE any imports
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import streamlit as st

from reveal_core import DataSourceError, DetailPanel, GraphView, Router, StatusIndicator, Viewport
from reveal_core.render import Palette
from viz.surface import MatplotlibSurface

# Frames advanced per "Play" press, by speed label
SPEED_FRAME_MAPPING = {
    "Slow": 15,
    "Normal": 30,
    "Fast": 90,
}

DEFAULT_DATA = os.path.join(project_root, "scripts", "sample_graph.yaml")


def get_speed_label_from_frames(frames):
    """Convert a frames-per-play value to a human-readable speed label."""
    for speed, value in SPEED_FRAME_MAPPING.items():
        if frames == value:
            return speed
    # Fallback for unknown frame counts
    if frames < SPEED_FRAME_MAPPING["Normal"]:
        return "Slow"
    elif frames > SPEED_FRAME_MAPPING["Normal"]:
        return "Fast"
    else:
        return "Normal"


class SessionPanel(DetailPanel):
    """Keeps the open detail sections in insertion order."""

    def __init__(self):
        self.sections = {}
        self.expanded = None

    def ensure_section(self, entity_id, expand=False):
        self.sections.setdefault(entity_id, True)
        if expand:
            self.expanded = entity_id

    def remove_section(self, entity_id):
        self.sections.pop(entity_id, None)
        if self.expanded == entity_id:
            self.expanded = None

    def expand_section(self, entity_id):
        self.expanded = entity_id


class SessionRouter(Router):
    def __init__(self):
        self.url = "/"

    def on_select(self, entity_id, url):
        self.url = url


class SessionStatus(StatusIndicator):
    def __init__(self):
        self.message = None
        self.failed = False

    def update(self, message):
        self.message = message

    def dismiss(self):
        self.message = None

    def error(self, message):
        self.message = message
        self.failed = True


class RevealSimulation:
    """Holds the view and its collaborators across Streamlit reruns."""

    def __init__(self, path, width=1280, height=800, dark=False):
        self.panel = SessionPanel()
        self.router = SessionRouter()
        self.status = SessionStatus()
        self.palette = Palette.dark() if dark else Palette.light()
        self.view = GraphView.from_source(
            path,
            viewport=Viewport(width, height),
            status=self.status,
            seed=0,
            panel=self.panel,
            router=self.router,
            palette=self.palette,
        )
        self.view.start()
        self.surface = MatplotlibSurface(background="#1e1e1e" if dark else "#ffffff")

    def step(self, frames=1):
        return self.view.step(frames)

    def draw(self):
        self.view.render(self.surface)
        return self.surface.fig


st.set_page_config(layout="wide", page_title="Graph Reveal")

with st.sidebar:
    st.header("🎛️ Controls")
    data_path = st.text_input("Graph data file", DEFAULT_DATA)
    dark_mode = st.toggle("Dark theme", value=False)
    if st.button("🔄 Load / Reset", use_container_width=True) or "sim" not in st.session_state:
        try:
            st.session_state.sim = RevealSimulation(data_path, dark=dark_mode)
        except DataSourceError as exc:
            st.session_state.sim = None
            st.error(f"Error loading graph data: {exc}")

sim = st.session_state.get("sim")
if sim is None:
    st.stop()

view = sim.view

with st.sidebar:
    st.divider()
    st.caption("Playback")
    speed = st.select_slider("Speed", options=list(SPEED_FRAME_MAPPING), value="Normal")
    col_step, col_play = st.columns(2)
    with col_step:
        if st.button("⏭️ Step", use_container_width=True):
            sim.step(1)
    with col_play:
        if st.button("▶️ Play", type="primary", use_container_width=True):
            sim.step(SPEED_FRAME_MAPPING[speed])
    st.caption(f"Speed: {get_speed_label_from_frames(SPEED_FRAME_MAPPING[speed])}")

    st.divider()
    st.caption("Focus")
    ids = [e.id for e in view.graph]
    current = view.selected.id if view.selected else view.graph.anchor_id
    choice = st.selectbox("Select entity", ids, index=ids.index(current) if current in ids else 0)
    if st.button("🎯 Focus", use_container_width=True):
        view.select_focus(choice)
    if st.button("🌐 Toggle show all", use_container_width=True):
        view.toggle_show_all()
    if st.button("🔁 Replay reveal", use_container_width=True):
        view.restart()

col_graph, col_details = st.columns([2, 1])

with col_graph:
    snap = view.snapshot()
    stage = snap["stage"] or "idle"
    st.subheader(f"🕸️ Graph (t={snap['t']:.0f}ms, stage={stage})")
    if sim.status.message:
        st.info(sim.status.message)
    st.pyplot(sim.draw(), use_container_width=True)
    st.caption(f"Address: {sim.router.url}")

with col_details:
    st.subheader("📋 Details")
    for entity_id in sim.panel.sections:
        entity = view.graph.get(entity_id)
        if entity is None:
            continue
        with st.expander(entity.name, expanded=entity_id == sim.panel.expanded):
            if entity.subtitle:
                st.caption(entity.subtitle)
            st.write(entity.description or "_No description._")

    col_visible, col_queue = st.columns(2)
    with col_visible:
        st.metric("Visible", len(view.graph.visible()))
    with col_queue:
        st.metric("Queued", snap["queue"])
