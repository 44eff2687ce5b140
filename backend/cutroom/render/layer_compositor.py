"""Visual layer compositing with ffmpeg filter_complex.

Items are stacked in the order they are given; each overlay consumes the
current composite and produces the next one, starting from a solid base canvas.
"""

from dataclasses import dataclass

from cutroom.render.filter_graph import FilterGraph, FilterNode, enable_window, format_number

BASE_LABEL = "base"
BASE_COLOR = "black"


@dataclass
class Canvas:
    width: int
    height: int
    duration: float
    fps: int | None = None


class LayerCompositor:
    """Builds the video branch of a composition graph."""

    def __init__(self, graph: FilterGraph, canvas: Canvas):
        self.graph = graph
        self.canvas = canvas
        self.current = self._add_base()

    def _add_base(self) -> str:
        label = self.graph.reserve(BASE_LABEL)
        options = {
            "c": BASE_COLOR,
            "s": f"{self.canvas.width}x{self.canvas.height}",
            "d": format_number(self.canvas.duration),
        }
        if self.canvas.fps:
            options["r"] = str(self.canvas.fps)
        self.graph.add(FilterNode("color", outputs=[label], options=options))
        return label

    def overlay(
        self,
        input_index: int,
        *,
        x: float,
        y: float,
        width: float,
        height: float,
        start: float,
        end: float,
    ) -> str:
        """Scale input ``input_index`` to its rectangle and overlay it for ``[start, end)``."""
        scaled = self.graph.new_label("scaled")
        self.graph.add(
            FilterNode(
                "scale",
                inputs=[f"{input_index}:v"],
                outputs=[scaled],
                args=[str(int(width)), str(int(height))],
            )
        )

        overlaid = self.graph.new_label("overlay")
        self.graph.add(
            FilterNode(
                "overlay",
                inputs=[self.current, scaled],
                outputs=[overlaid],
                args=[str(int(x)), str(int(y))],
                options={"enable": enable_window(start, end)},
            )
        )
        self.current = overlaid
        return overlaid

    def replace_current(self, label: str) -> None:
        """Advance the composite to a label produced by another builder (e.g. text)."""
        self.current = label
