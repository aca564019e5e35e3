# streamlit_app.py
import logging
from pathlib import Path

import streamlit as st
from streamlit_echarts import st_echarts

from athletics_flow.constants import (
    ALLOWED_EXTS, ALLOWED_MIME, MAX_UPLOAD_MB, DEFAULT_DATA_PATH, DEFAULT_DATASET,
    LINK_COLOR_CHOICES, REVENUE_ROW_COUNT, AGGREGATOR_NAME, AGGREGATOR_TITLE,
)
from athletics_flow.echarts import make_echarts_sankey_options
from athletics_flow.graph import InvalidInputError, build
from athletics_flow.io import (
    available_datasets, get_excel_sheets, load_document, read_table_any,
    rows_from_document, rows_from_frame, validate_upload,
)
from athletics_flow.sankey import RenderContext, make_sankey_figure, format_value

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

SAMPLE_PATH = Path(__file__).parent / DEFAULT_DATA_PATH

st.set_page_config(page_title="Athletics Flow", layout="wide")
st.title("🏈 Athletics revenue → expense flow")

THEME_BASE = (st.get_option("theme.base") or "light").lower()
IS_DARK = THEME_BASE == "dark"
PLOTLY_TEMPLATE = "plotly_dark" if IS_DARK else "plotly_white"
ECHR_THEME = "dark" if IS_DARK else "light"


# =======================================================================================
# SIDEBAR (data source, options)
# =======================================================================================

st.sidebar.header("📒 Data")
uploaded = st.sidebar.file_uploader(
    "Upload JSON, CSV or Excel",
    type=[ext.lstrip(".") for ext in ALLOWED_EXTS],
    key="athletics_upload",
)

rows = None
try:
    if uploaded is not None:
        ok, msg = validate_upload(
            uploaded,
            allowed_exts=ALLOWED_EXTS,
            allowed_mime=ALLOWED_MIME,
            max_bytes=MAX_UPLOAD_MB * 1024 * 1024,
        )
        if not ok:
            st.error(msg)
            st.stop()

        ext = Path(uploaded.name).suffix.lower()
        if ext in {".xlsx", ".xls", ".xlsm"}:
            sheets = get_excel_sheets(uploaded)
            sheet = st.sidebar.selectbox("Excel sheet", sheets, index=0)
            rows = rows_from_frame(read_table_any(uploaded, sheet_name=sheet))
        elif ext == ".csv":
            rows = rows_from_frame(read_table_any(uploaded))
        else:
            doc = load_document(uploaded)
            keys = available_datasets(doc) or [DEFAULT_DATASET]
            dataset = st.sidebar.selectbox(
                "Dataset", keys, index=keys.index(DEFAULT_DATASET) if DEFAULT_DATASET in keys else 0
            )
            rows = rows_from_document(doc, dataset=dataset)
        st.sidebar.caption(f"Detected file: **{uploaded.name}**")
    else:
        doc = load_document(SAMPLE_PATH)
        rows = rows_from_document(doc, dataset=DEFAULT_DATASET)
        st.sidebar.caption(f"Using bundled sample: **{SAMPLE_PATH.name}**")
except (ValueError, OSError) as e:  # InvalidInputError, bad JSON, unreadable file
    st.error(f"Could not load data: {e}")
    st.stop()

st.sidebar.caption(
    f"The first {REVENUE_ROW_COUNT} rows are read as revenue, the rest as expenses."
)

st.sidebar.divider()
st.sidebar.header("🎨 Chart")
chart_type = st.sidebar.radio("Renderer", ("Sankey (Plotly)", "Sankey (ECharts)"), index=0)
link_color = st.sidebar.selectbox("Link color", LINK_COLOR_CHOICES, index=0)
strict = st.sidebar.toggle("Reject unknown columns", value=False)
if chart_type == "Sankey (ECharts)":
    ech_curveness = st.sidebar.slider("Curveness", 0.0, 1.0, 0.5, 0.05)
    ech_edge_font = st.sidebar.number_input("Edge label size", 6, 24, 11)


# =======================================================================================
# MAIN
# =======================================================================================

try:
    graph = build(rows, strict=strict)
except InvalidInputError as e:
    st.error(f"Could not build the flow graph: {e}")
    st.stop()

values = graph.node_values()
c1, c2, c3 = st.columns(3)
c1.metric("Nodes", len(graph.nodes))
c2.metric("Flows", len(graph.links))
c3.metric(f"Through {AGGREGATOR_TITLE}", format_value(values.get(AGGREGATOR_NAME, 0)))

context = RenderContext(link_color=link_color, template=PLOTLY_TEMPLATE)
title = f"{AGGREGATOR_TITLE}: revenue → expenses"

if not graph.links:
    st.info("No positive flows to display.")
elif chart_type == "Sankey (Plotly)":
    fig = make_sankey_figure(graph, title=title, context=context)
    st.plotly_chart(fig, use_container_width=True)
else:
    options = make_echarts_sankey_options(
        graph,
        title=title,
        value_suffix=" $",
        curveness=ech_curveness,
        edge_font_size=int(ech_edge_font),
        context=context,
    )
    st_echarts(options=options, height="600px", theme=ECHR_THEME)

with st.expander("Nodes"):
    st.dataframe(graph.nodes_frame(), use_container_width=True)
with st.expander("Flows"):
    st.dataframe(graph.to_frame(), use_container_width=True)
