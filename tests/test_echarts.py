from athletics_flow.echarts import make_echarts_sankey_options
from athletics_flow.graph import build
from athletics_flow.sankey import RenderContext


def test_options_shape(records):
    g = build(records)
    opts = make_echarts_sankey_options(g, title="Flows", value_suffix=" $")
    series = opts["series"][0]
    assert series["type"] == "sankey"
    assert opts["title"]["text"] == "Flows"
    assert [n["name"] for n in series["data"]] == [n.name for n in g.nodes]
    assert len(series["links"]) == len(g.links)


def test_link_labels_are_preformatted(records):
    records[0]["Football"] = 1_234_567
    g = build(records)
    series = make_echarts_sankey_options(g, title="Flows", value_suffix=" $")["series"][0]
    first = series["links"][0]
    assert first["source"] == "source-football"
    assert first["value"] == 1_234_567.0
    assert first["name"] == "Football → 1,234,567 $ → Ticket Sales"


def test_node_labels_use_titles(records):
    g = build(records)
    series = make_echarts_sankey_options(g, title="Flows")["series"][0]
    assert series["data"][0]["label"]["formatter"] == "Football"


def test_line_color_modes(records):
    g = build(records)

    def line_color(mode):
        opts = make_echarts_sankey_options(g, title="x", context=RenderContext(link_color=mode))
        return opts["series"][0]["lineStyle"]["color"]

    assert line_color("source-target") == "gradient"
    assert line_color("source") == "source"
    assert line_color("#aaaaaa") == "#aaaaaa"
