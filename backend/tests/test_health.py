"""Tests for health and front end endpoints."""


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_root_serves_app_shell(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "app shell" in response.text


def test_static_file(client):
    response = client.get("/app.js")
    assert response.status_code == 200
    assert "console.log" in response.text


def test_unknown_path_falls_back_to_shell(client):
    response = client.get("/some/client/route")
    assert response.status_code == 200
    assert "app shell" in response.text


def test_user_guide_page(client):
    response = client.get("/user_guide/en/start.html")
    assert response.status_code == 200
    assert "getting started" in response.text


def test_user_guide_falls_back_to_guide_index(client):
    response = client.get("/user_guide/missing/page")
    assert response.status_code == 200
    assert "guide index" in response.text


def test_path_traversal_is_not_served(client, tmp_path):
    (tmp_path / "secret.txt").write_text("top secret")
    response = client.get("/..%2Fsecret.txt")
    assert "top secret" not in response.text


def test_missing_public_dir_is_404(make_client, remote, tmp_path):
    client = make_client(remote, public_dir=tmp_path / "nowhere")
    response = client.get("/")
    assert response.status_code == 404
    assert client.get("/health").status_code == 200
