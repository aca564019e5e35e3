import plotly.colors as pc
import pytest

from athletics_flow.graph import InvalidInputError, NodeGroup, build
from athletics_flow.io import load_rows
from athletics_flow.sankey import (
    RenderContext,
    export_html,
    format_value,
    make_sankey_figure,
    to_index_lists,
)


@pytest.fixture
def graph(records):
    return build(records)


def test_format_value():
    assert format_value(1234567.4) == "1,234,567"
    assert format_value(999) == "999"
    assert format_value(0.4) == "0"


def test_to_index_lists(graph):
    d = to_index_lists(graph)
    assert set(d.keys()) == {"nodes", "sources", "targets", "values"}
    assert len(d["sources"]) == len(d["targets"]) == len(d["values"]) == len(graph.links)
    assert d["nodes"][d["sources"][0]] == "Football"
    assert sum(d["values"]) == sum(link.value for link in graph.links)


def test_figure_shape(graph):
    fig = make_sankey_figure(graph, title="Flows")
    trace = fig.data[0]
    assert trace.type == "sankey"
    assert len(trace.node.label) == len(graph.nodes)
    assert list(trace.link.value) == [link.value for link in graph.links]
    assert fig.layout.width == 928 and fig.layout.height == 600
    assert fig.layout.title.text == "Flows"


def test_hover_text_uses_grouped_thousands(sample_path):
    g = build(load_rows(sample_path))
    trace = make_sankey_figure(g).data[0]
    assert "jmu-athletics<br>64,338,000" in trace.node.customdata
    assert trace.link.customdata[0] == "source-football → revenue-ticket-sales<br>1,850,000"
    assert trace.link.label[0] == "Football → 1,850,000 → Ticket Sales"


def test_node_colors_follow_group(graph):
    ctx = RenderContext()
    trace = make_sankey_figure(graph, context=ctx).data[0]
    assert trace.node.color[0] == ctx.color_for(NodeGroup.SOURCE)
    assert trace.node.color[-1] == ctx.color_for(NodeGroup.TARGET)
    assert ctx.color_for(NodeGroup.SOURCE) == pc.qualitative.D3[0]


def test_link_color_modes():
    src, tgt = NodeGroup.SOURCE, NodeGroup.REVENUE
    assert RenderContext(link_color="source").link_color_for(src, tgt) == "rgba(31, 119, 180, 0.5)"
    assert RenderContext(link_color="target").link_color_for(src, tgt) == "rgba(255, 127, 14, 0.5)"
    assert RenderContext(link_color="source-target").link_color_for(src, tgt) == "rgba(143, 123, 97, 0.5)"
    assert RenderContext(link_color="#aaaaaa").link_color_for(src, tgt) == "#aaaaaa"


def test_contexts_are_independent(graph):
    a = RenderContext(link_color="source")
    b = RenderContext(link_color="target")
    a.palette[0] = "#000000"
    assert b.palette[0] == pc.qualitative.D3[0]
    fig_b = make_sankey_figure(graph, context=b)
    assert fig_b.data[0].node.color[0] == pc.qualitative.D3[0]


def test_export_html(graph, tmp_path):
    out = export_html(graph, tmp_path / "out" / "sankey.html", title="JMU")
    text = out.read_text(encoding="utf-8")
    assert out.exists()
    assert "<html>" in text
    assert "sankey" in text


def test_unsupported_link_color_rejected():
    with pytest.raises(InvalidInputError):
        RenderContext(link_color="notacolor")
    assert RenderContext(link_color="rgba(0, 0, 0, 0.2)").link_color == "rgba(0, 0, 0, 0.2)"
