"""Typed intermediate representation for ffmpeg filter graphs and commands.

Builders append ``FilterNode`` objects to a ``FilterGraph`` instead of
concatenating filter strings; the graph is rendered to ffmpeg's
``-filter_complex`` syntax once, at the end.
"""

from collections import defaultdict
from dataclasses import dataclass, field


def format_number(value: float | int) -> str:
    """Render a number the way ffmpeg expects it (``5`` not ``5.0``)."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def enable_window(start: float, end: float) -> str:
    """Timeline expression that is true for ``start <= t < end``."""
    return f"'gte(t,{format_number(start)})*lt(t,{format_number(end)})'"


@dataclass
class FilterNode:
    """One filter in a graph.

    Rendered as ``[in1][in2]kind=arg1:arg2:key=value[out]``. Input labels may be
    stream specifiers such as ``0:v``.
    """

    kind: str
    inputs: list[str] = field(default_factory=list)
    outputs: list[str] = field(default_factory=list)
    args: list[str] = field(default_factory=list)
    options: dict[str, str] = field(default_factory=dict)

    def render(self) -> str:
        params = [*self.args, *(f"{key}={value}" for key, value in self.options.items())]
        body = f"{self.kind}={':'.join(params)}" if params else self.kind
        ins = "".join(f"[{label}]" for label in self.inputs)
        outs = "".join(f"[{label}]" for label in self.outputs)
        return f"{ins}{body}{outs}"


class FilterGraph:
    """Ordered filter nodes with unique output labels."""

    def __init__(self):
        self.nodes: list[FilterNode] = []
        self._labels: set[str] = set()
        self._counters: dict[str, int] = defaultdict(int)

    def __len__(self) -> int:
        return len(self.nodes)

    def __bool__(self) -> bool:
        return bool(self.nodes)

    def new_label(self, prefix: str) -> str:
        """Allocate ``prefix<N>`` not used by any node in this graph."""
        while True:
            label = f"{prefix}{self._counters[prefix]}"
            self._counters[prefix] += 1
            if label not in self._labels:
                self._labels.add(label)
                return label

    def reserve(self, label: str) -> str:
        """Claim a fixed label such as ``base`` or ``final_audio``."""
        if label in self._labels:
            raise ValueError(f"Filter label already in use: {label}")
        self._labels.add(label)
        return label

    def add(self, node: FilterNode) -> FilterNode:
        for label in node.outputs:
            self._labels.add(label)
        self.nodes.append(node)
        return node

    def render(self) -> str:
        return ";".join(node.render() for node in self.nodes)


@dataclass
class EngineInput:
    """One ``-i`` input, with the options that must precede it (``-ss``, ``-f lavfi``)."""

    path: str
    options: list[str] = field(default_factory=list)

    def to_args(self) -> list[str]:
        return [*self.options, "-i", self.path]


@dataclass
class EngineCommand:
    """A complete ffmpeg invocation, minus the binary itself."""

    inputs: list[EngineInput]
    output_path: str
    filter_graph: FilterGraph | None = None
    maps: list[str] = field(default_factory=list)
    codec_args: list[str] = field(default_factory=list)
    output_args: list[str] = field(default_factory=list)
    # Public URL the output will be served at once the command succeeds
    output_url: str | None = None

    def to_args(self) -> list[str]:
        args = ["-y"]
        for engine_input in self.inputs:
            args.extend(engine_input.to_args())
        if self.filter_graph:
            args.extend(["-filter_complex", self.filter_graph.render()])
        for stream in self.maps:
            args.extend(["-map", stream])
        args.extend(self.codec_args)
        args.extend(self.output_args)
        args.append(self.output_path)
        return args
