import logging
from pathlib import Path

from flask import Flask, current_app, jsonify, render_template_string, request

from athletics_flow.constants import DEFAULT_DATA_PATH, DEFAULT_DATASET, LINK_COLOR
from athletics_flow.graph import InvalidInputError, build
from athletics_flow.io import load_rows
from athletics_flow.sankey import RenderContext, make_sankey_figure

logger = logging.getLogger(__name__)

PAGE = '''
<html>
<head>
    <title>{{ title }}</title>
    <link rel="stylesheet" href="https://stackpath.bootstrapcdn.com/bootstrap/4.5.2/css/bootstrap.min.css">
</head>
<body>
    <div class="container">
        <h1>{{ title }}</h1>
        <p class="text-muted">Dataset <code>{{ dataset }}</code>: {{ n_nodes }} nodes, {{ n_links }} flows</p>
        {{ sankey_html|safe }}
        <h2>Flows</h2>
        {{ links_html|safe }}
    </div>
</body>
</html>
'''


def _data_path() -> Path:
    path = Path(current_app.config["DATA_PATH"])
    if not path.is_absolute():
        path = Path(current_app.root_path) / path
    return path


def _load_graph():
    dataset = request.args.get("dataset", current_app.config["DATASET"])
    strict = request.args.get("strict", "").lower() in {"1", "true", "yes"}
    path = _data_path()
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")
    rows = load_rows(path, dataset=dataset)
    return dataset, build(rows, strict=strict)


def create_app(config=None):
    # Create the Flask application instance
    app = Flask(__name__)
    app.config.from_mapping(
        DATA_PATH=DEFAULT_DATA_PATH,
        DATASET=DEFAULT_DATASET,
        LINK_COLOR=LINK_COLOR,
        TITLE="JMU Athletics revenue and expenses",
    )
    # e.g. ATHLETICS_DATA_PATH=/srv/data/jmu.json
    app.config.from_prefixed_env("ATHLETICS")
    if config:
        app.config.update(config)

    @app.errorhandler(InvalidInputError)
    def invalid_input(e):
        logger.warning("Rejected input: %s", e)
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(FileNotFoundError)
    def missing_data(e):
        logger.error("%s", e)
        return jsonify({"error": str(e)}), 404

    # Diagram page
    @app.route('/')
    def sankey_page():
        dataset, graph = _load_graph()
        context = RenderContext(link_color=request.args.get("link_color", app.config["LINK_COLOR"]))
        fig = make_sankey_figure(graph, title=app.config["TITLE"], context=context)

        links_html = graph.to_frame().to_html(
            classes='table table-striped', index=False, border=0, table_id='linksTable',
            float_format=lambda v: f"{v:,.0f}",
        )
        return render_template_string(
            PAGE,
            title=app.config["TITLE"],
            dataset=dataset,
            n_nodes=len(graph.nodes),
            n_links=len(graph.links),
            sankey_html=fig.to_html(full_html=False, include_plotlyjs="cdn"),
            links_html=links_html,
        )

    # Raw graph for other renderers
    @app.route('/api/graph')
    def graph_json():
        _, graph = _load_graph()
        return jsonify(graph.to_dict())

    return app


# Run the application
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    create_app().run(debug=True)
