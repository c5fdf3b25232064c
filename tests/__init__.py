"""
Tests Package.

This package contains test suites for the staged-reveal graph view, including
unit tests for the physics, visibility and scheduling components and
scenario tests driving a whole `GraphView` through reveal episodes, focus
changes and gestures.
"""

# Tests Package
