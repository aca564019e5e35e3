# athletics_flow/sankey.py
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union
import logging
import re

import plotly.colors as pc
import plotly.graph_objects as go

from athletics_flow.constants import (
    CHART_HEIGHT,
    CHART_WIDTH,
    LINK_COLOR,
    NODE_PADDING,
    NODE_WIDTH,
    VALUE_FORMAT,
)
from athletics_flow.graph import InvalidInputError, NodeGroup, SankeyGraph

logger = logging.getLogger(__name__)

LINK_OPACITY = 0.5
LINK_MODES = {"source", "target", "source-target"}
_COLOR = re.compile(r"^(#[0-9a-fA-F]{3}|#[0-9a-fA-F]{6}|rgba?\([\d\s.,]+\))$")


def format_value(v: float, fmt: str = VALUE_FORMAT) -> str:
    """Grouped thousands, no decimals by default: 1234567.4 -> '1,234,567'."""
    return f"{float(v):{fmt}}"


@dataclass
class RenderContext:
    """
    Everything a single render needs. Build a fresh one per chart instead of
    sharing a palette or figure between renders.
    """
    width: int = CHART_WIDTH
    height: int = CHART_HEIGHT
    node_width: int = NODE_WIDTH
    node_padding: int = NODE_PADDING
    link_color: str = LINK_COLOR   # source, target, source-target, or a color string
    value_format: str = VALUE_FORMAT
    palette: List[str] = field(default_factory=lambda: list(pc.qualitative.D3))
    template: Optional[str] = None

    def __post_init__(self):
        if self.link_color not in LINK_MODES and not _COLOR.match(self.link_color or ""):
            raise InvalidInputError(
                f"Unsupported link color {self.link_color!r}: use source, target, source-target, a hex or an rgb() color"
            )

    def color_for(self, group: NodeGroup) -> str:
        groups = list(NodeGroup)
        return self.palette[groups.index(group) % len(self.palette)]

    def link_color_for(self, source: NodeGroup, target: NodeGroup) -> str:
        if self.link_color == "source":
            return _rgba(self.color_for(source))
        if self.link_color == "target":
            return _rgba(self.color_for(target))
        if self.link_color == "source-target":
            # Plotly links take one color; use the midpoint of both ends
            mid = pc.find_intermediate_color(
                _rgb(self.color_for(source)), _rgb(self.color_for(target)), 0.5
            )
            return _rgba(mid)
        return self.link_color


def _rgb(color: str) -> Tuple[float, float, float]:
    if color.startswith("#"):
        return pc.hex_to_rgb(color)
    return pc.unlabel_rgb(color)


def _rgba(color: Union[str, Tuple[float, float, float]], alpha: float = LINK_OPACITY) -> str:
    r, g, b = _rgb(color) if isinstance(color, str) else color
    return f"rgba({round(r)}, {round(g)}, {round(b)}, {alpha})"


def to_index_lists(graph: SankeyGraph) -> Dict[str, List]:
    """Positional form of the graph: node titles plus parallel source/target/value lists."""
    index = graph.node_index()
    return {
        "nodes": [n.title for n in graph.nodes],
        "sources": [index[link.source] for link in graph.links],
        "targets": [index[link.target] for link in graph.links],
        "values": [link.value for link in graph.links],
    }


def make_sankey_figure(
    graph: SankeyGraph,
    title: str = "Sankey",
    context: Optional[RenderContext] = None,
) -> go.Figure:
    ctx = context or RenderContext()
    data = to_index_lists(graph)
    groups = {n.name: n.group for n in graph.nodes}
    titles = {n.name: n.title for n in graph.nodes}
    values = graph.node_values()

    fig = go.Figure(data=[go.Sankey(
        valueformat=ctx.value_format,
        node=dict(
            pad=ctx.node_padding,
            thickness=ctx.node_width,
            line=dict(color="black", width=0.5),
            label=data["nodes"],
            color=[ctx.color_for(n.group) for n in graph.nodes],
            customdata=[f"{n.name}<br>{format_value(values[n.name], ctx.value_format)}" for n in graph.nodes],
            hovertemplate="%{customdata}<extra></extra>"
        ),
        link=dict(
            source=data["sources"],
            target=data["targets"],
            value=data["values"],
            color=[ctx.link_color_for(groups[link.source], groups[link.target]) for link in graph.links],
            label=[
                f"{titles[link.source]} → {format_value(link.value, ctx.value_format)} → {titles[link.target]}"
                for link in graph.links
            ],
            customdata=[
                f"{link.source} → {link.target}<br>{format_value(link.value, ctx.value_format)}"
                for link in graph.links
            ],
            hovertemplate="%{customdata}<extra></extra>"
        )
    )])
    fig.update_layout(
        title=title,
        width=ctx.width,
        height=ctx.height,
        font=dict(size=10, family="sans-serif"),
        margin=dict(l=10, r=10, t=40, b=10),
    )
    if ctx.template:
        fig.update_layout(template=ctx.template)
    return fig


def export_html(
    graph: SankeyGraph,
    path: Union[str, Path],
    title: str = "Sankey",
    context: Optional[RenderContext] = None,
) -> Path:
    """Write the diagram as a standalone browser document."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig = make_sankey_figure(graph, title=title, context=context)
    fig.write_html(str(out), include_plotlyjs="cdn", full_html=True)
    logger.info("Wrote sankey HTML to %s", out)
    return out
