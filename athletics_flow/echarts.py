# athletics_flow/echarts.py
from __future__ import annotations
from typing import Any, Dict, Optional

from athletics_flow.graph import SankeyGraph
from athletics_flow.sankey import RenderContext, format_value


def make_echarts_sankey_options(
    graph: SankeyGraph,
    title: str,
    value_suffix: str = "",
    curveness: float = 0.5,
    edge_font_size: int = 11,
    context: Optional[RenderContext] = None,
) -> Dict[str, Any]:
    ctx = context or RenderContext()

    values = graph.node_values()
    titles = {n.name: n.title for n in graph.nodes}

    # ECharts keys nodes by name; titles go in the label formatter
    nodes = [
        {
            "name": n.name,
            "value": values[n.name],
            "itemStyle": {"color": ctx.color_for(n.group)},
            "label": {"formatter": n.title},
        }
        for n in graph.nodes
    ]

    # Preformat label into link.name; keep numeric value for thickness
    links = [
        {
            "source": link.source,
            "target": link.target,
            "value": float(link.value),
            "name": (
                f"{titles[link.source]} → "
                f"{format_value(link.value, ctx.value_format)}{value_suffix} → {titles[link.target]}"
            ),
        }
        for link in graph.links
    ]

    line_color = ctx.link_color if ctx.link_color in ("source", "target") else (
        "gradient" if ctx.link_color == "source-target" else ctx.link_color
    )

    return {
        "title": {"text": title, "left": "center"},
        "tooltip": {"show": True, "trigger": "item", "triggerOn": "mousemove|click"},
        "series": [{
            "type": "sankey",
            "layoutIterations": 32,
            "nodeWidth": ctx.node_width,
            "nodeGap": ctx.node_padding,
            "nodeAlign": "justify",
            "data": nodes,
            "links": links,
            "lineStyle": {"color": line_color, "curveness": curveness, "opacity": 0.5},
            "label": {"show": True},  # node labels
            "edgeLabel": {
                "show": True,
                "formatter": "{b}",    # <- use link.name
                "position": "middle",
                "fontSize": edge_font_size,
                "color": "#000"
            }
        }]
    }
