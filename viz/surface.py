"""
Matplotlib-backed drawing surface.

Maps the renderer's primitive calls onto a single Axes whose data
coordinates are surface pixels with the origin at the top left.
"""

from __future__ import annotations

from typing import Optional, Sequence

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.patches import Circle, Polygon, Rectangle  # noqa: E402

from reveal_core.render import Point, Surface  # noqa: E402


class MatplotlibSurface(Surface):
    """Draws onto a matplotlib Figure; call `save` to write an image."""

    def __init__(self, dpi: int = 100, background: str = "#ffffff"):
        self.dpi = dpi
        self.background = background
        self.fig = None
        self.ax = None
        self._z = 0

    def _next_z(self) -> int:
        self._z += 1
        return self._z

    def begin_frame(self, width: float, height: float) -> None:
        if self.fig is not None:
            plt.close(self.fig)
        self.fig = plt.figure(figsize=(width / self.dpi, height / self.dpi), dpi=self.dpi)
        self.ax = self.fig.add_axes([0, 0, 1, 1])
        self.ax.set_xlim(0, width)
        self.ax.set_ylim(height, 0)
        self.ax.set_facecolor(self.background)
        self.ax.axis("off")
        self._z = 0

    def line(self, x1, y1, x2, y2, color, width=1.0, alpha=1.0, dash: Optional[Sequence[float]] = None):
        (artist,) = self.ax.plot([x1, x2], [y1, y2], color=color, linewidth=width * 0.75,
                                 alpha=alpha, zorder=self._next_z(), solid_capstyle="round")
        if dash:
            artist.set_dashes(list(dash))

    def _halo(self, patch_factory, halo: Optional[str], alpha: float) -> None:
        if halo is None:
            return
        patch = patch_factory()
        patch.set_facecolor("none")
        patch.set_edgecolor(halo)
        patch.set_linewidth(4)
        patch.set_alpha(alpha * 0.3)
        patch.set_zorder(self._next_z())
        self.ax.add_patch(patch)

    def circle(self, x, y, radius, fill, stroke, line_width=2.0, alpha=1.0, halo=None):
        self._halo(lambda: Circle((x, y), radius + 3), halo, alpha)
        self.ax.add_patch(Circle((x, y), radius, facecolor=fill, edgecolor=stroke,
                                 linewidth=line_width * 0.75, alpha=alpha, zorder=self._next_z()))

    def polygon(self, points: Sequence[Point], fill, stroke, line_width=2.0, alpha=1.0, halo=None):
        self._halo(lambda: Polygon(list(points), closed=True), halo, alpha)
        self.ax.add_patch(Polygon(list(points), closed=True, facecolor=fill, edgecolor=stroke,
                                  linewidth=line_width * 0.75, alpha=alpha, zorder=self._next_z()))

    def rect(self, x, y, width, height, fill, alpha=1.0):
        self.ax.add_patch(Rectangle((x, y), width, height, facecolor=fill, edgecolor="none",
                                    alpha=alpha, zorder=self._next_z()))

    def text(self, x, y, text, color, size=12.0, align="center", baseline="top", alpha=1.0):
        va = {"top": "top", "middle": "center", "bottom": "bottom"}.get(baseline, "top")
        self.ax.text(x, y, text, color=color, fontsize=size * 0.75, ha=align, va=va,
                     alpha=alpha, zorder=self._next_z())

    def save(self, path: str) -> None:
        """Write the current frame to `path` (format from the suffix)."""
        if self.fig is None:
            raise RuntimeError("no frame has been drawn")
        self.fig.savefig(path, dpi=self.dpi, facecolor=self.background)

    def close(self) -> None:
        if self.fig is not None:
            plt.close(self.fig)
            self.fig = None
            self.ax = None
