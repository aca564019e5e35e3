import pytest

from app import create_app


@pytest.fixture
def client(sample_path):
    app = create_app({"TESTING": True, "DATA_PATH": str(sample_path)})
    return app.test_client()


def test_graph_json(client):
    resp = client.get("/api/graph")
    assert resp.status_code == 200
    body = resp.get_json()
    assert len(body["nodes"]) == 37
    assert body["nodes"][16]["name"] == "jmu-athletics"
    assert all(link["value"] > 0 for link in body["links"])


def test_page_renders_chart(client):
    resp = client.get("/?link_color=source")
    assert resp.status_code == 200
    html = resp.get_data(as_text=True)
    assert "JMU Athletics revenue and expenses" in html
    assert "linksTable" in html
    assert "sankey" in html


def test_unknown_dataset_is_bad_request(client):
    resp = client.get("/api/graph?dataset=nope")
    assert resp.status_code == 400
    assert "not found" in resp.get_json()["error"]


def test_missing_data_file(tmp_path):
    app = create_app({"TESTING": True, "DATA_PATH": str(tmp_path / "missing.json")})
    resp = app.test_client().get("/api/graph")
    assert resp.status_code == 404


def test_bad_link_color_is_bad_request(client):
    resp = client.get("/?link_color=notacolor")
    assert resp.status_code == 400
    assert "link color" in resp.get_json()["error"]


def test_hex_link_color_accepted(client):
    assert client.get("/?link_color=%23aaaaaa").status_code == 200
