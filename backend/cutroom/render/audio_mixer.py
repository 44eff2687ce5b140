"""Audio branch construction for compositions.

Each audible item gets its own delayed branch; the branches are then merged
into a single ``final_audio`` stream.
"""

from cutroom.render.filter_graph import FilterGraph, FilterNode

FINAL_AUDIO_LABEL = "final_audio"


class AudioMixer:
    """Collects delayed audio branches and mixes them."""

    def __init__(self, graph: FilterGraph):
        self.graph = graph
        self.branches: list[str] = []

    def add_delayed(self, input_index: int, start_time: float) -> str:
        """Delay input ``input_index``'s audio so it starts at ``start_time`` seconds."""
        label = self.graph.new_label("audio")
        delay_ms = max(int(start_time * 1000), 0)
        self.graph.add(
            FilterNode(
                "adelay",
                inputs=[f"{input_index}:a"],
                outputs=[label],
                args=[f"{delay_ms}ms"],
                options={"all": "1"},
            )
        )
        self.branches.append(label)
        return label

    def finalize(self) -> str | None:
        """Merge all branches into one stream and return its label.

        Returns None when nothing is audible. A single branch is passed through
        unchanged.
        """
        if not self.branches:
            return None

        label = self.graph.reserve(FINAL_AUDIO_LABEL)
        if len(self.branches) == 1:
            node = FilterNode("anull", inputs=[self.branches[0]], outputs=[label])
        else:
            node = FilterNode(
                "amix",
                inputs=list(self.branches),
                outputs=[label],
                options={"inputs": str(len(self.branches)), "duration": "longest"},
            )
        self.graph.add(node)
        return label
