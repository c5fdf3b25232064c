"""
Visualization Package.

This package provides drawing and viewing tools for the staged-reveal graph:
a matplotlib surface the core renderer can draw onto, Cytoscape element
export for web front ends, and an interactive Streamlit viewer that plays a
reveal episode frame by frame.
"""

# Visualization Package
