"""drawtext filter construction for text overlays."""

from cutroom.render.filter_graph import FilterGraph, FilterNode, enable_window, format_number

DEFAULT_FONT_SIZE = 24
DEFAULT_FONT_COLOR = "white"


def escape_drawtext(text: str) -> str:
    """Escape text for a single-quoted drawtext value."""
    return text.replace("\\", "\\\\").replace("'", "'\\''").replace(":", "\\:").replace("%", "\\%")


def drawtext_node(
    source: str,
    output: str,
    *,
    text: str,
    x: str,
    y: str,
    fontsize: float | int,
    fontcolor: str,
    start: float,
    end: float,
    fontfile: str | None = None,
) -> FilterNode:
    options: dict[str, str] = {}
    if fontfile:
        options["fontfile"] = f"'{fontfile}'"
    options.update(
        text=f"'{escape_drawtext(text)}'",
        x=x,
        y=y,
        fontsize=format_number(fontsize),
        fontcolor=fontcolor,
        enable=enable_window(start, end),
    )
    return FilterNode("drawtext", inputs=[source], outputs=[output], options=options)


class TextRenderer:
    """Adds text overlays on top of the running composite."""

    def __init__(self, graph: FilterGraph):
        self.graph = graph

    def draw(
        self,
        source: str,
        *,
        text: str,
        x: float | str,
        y: float | str,
        start: float,
        end: float,
        font_size: float = 0,
        color: str = "",
    ) -> str | None:
        """Draw ``text`` over ``source``; return the new composite label.

        Empty text draws nothing and returns None. Zero size and empty color fall
        back to the defaults.
        """
        if not text:
            return None

        label = self.graph.new_label("text")
        self.graph.add(
            drawtext_node(
                source,
                label,
                text=text,
                x=x if isinstance(x, str) else format_number(int(x)),
                y=y if isinstance(y, str) else format_number(int(y)),
                fontsize=int(font_size) if font_size else DEFAULT_FONT_SIZE,
                fontcolor=color or DEFAULT_FONT_COLOR,
                start=start,
                end=end,
            )
        )
        return label
