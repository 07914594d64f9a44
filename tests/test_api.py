import cv2
import pytest
import requests
from fastapi.testclient import TestClient

import main
from config import Settings
from conftest import FakeHttp, FakeResponse, gemini_reply, make_landmarks, make_portrait

PASSWORD = "open-sesame"


class FakeExtractor:
    def __init__(self, landmarks):
        self.landmarks = landmarks

    def detect_landmarks(self, image):
        return self.landmarks


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(main, "settings", Settings(access_password=PASSWORD, google_api_key="key-123"))
    monkeypatch.setattr(main, "get_extractor", lambda: FakeExtractor(make_landmarks()))
    return TestClient(main.app)


@pytest.fixture
def portrait_png():
    ok, buffer = cv2.imencode('.png', cv2.cvtColor(make_portrait(), cv2.COLOR_RGB2BGR))
    assert ok
    return buffer.tobytes()


def fake_upstream(monkeypatch, *replies):
    http = FakeHttp(*replies)
    monkeypatch.setattr(requests, "post", http.post)
    monkeypatch.setattr(requests, "get", http.get)
    return http


def test_root_lists_endpoints(client):
    body = client.get("/").json()
    assert "/analyze" in body["endpoints"]
    assert "/api/generate-hair" in body["endpoints"]


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["components"]["remote_edit_configured"] is True


def test_analyze_portrait(client, portrait_png):
    before = main.analytics['total_analyses']

    response = client.post("/analyze", files={"file": ("face.png", portrait_png, "image/png")})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert body["season"] in ('spring', 'summer', 'autumn', 'winter')
    assert body["colors"]["hair"] == {"rgb": [60, 40, 30], "hex": "#3C281E"}
    assert body["diagnosis"]["season"] == body["season"]
    assert set(body["diagnosis"]["scores"]) == {'spring', 'summer', 'autumn', 'winter'}
    assert len(body["hair_palette"]) == 6
    assert len(body["recommended_hair_colors"]) == 3
    assert main.analytics['total_analyses'] == before + 1

    stats = client.get("/stats").json()
    assert stats["most_common_seasons"][body["season"]] >= 1


def test_analyze_without_face(client, portrait_png, monkeypatch):
    monkeypatch.setattr(main, "get_extractor", lambda: FakeExtractor(None))
    before = main.analytics['faces_not_found']

    response = client.post("/analyze", files={"file": ("face.png", portrait_png, "image/png")})

    assert response.status_code == 400
    assert "Face not found" in response.json()["detail"]
    assert main.analytics['faces_not_found'] == before + 1


def test_analyze_rejects_non_image(client):
    response = client.post("/analyze", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert response.status_code == 400


def test_analyze_degenerate_landmarks(client, portrait_png, monkeypatch):
    monkeypatch.setattr(main, "get_extractor", lambda: FakeExtractor(make_landmarks()[:50]))
    response = client.post("/analyze", files={"file": ("face.png", portrait_png, "image/png")})
    assert response.status_code == 422


@pytest.mark.parametrize("strategy", ["color", "geometric"])
def test_simulate_hair(client, portrait_png, strategy):
    response = client.post(
        "/simulate-hair",
        files={"file": ("face.png", portrait_png, "image/png")},
        data={"color": "#B22222", "strategy": strategy},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["strategy"] == strategy
    assert body["imageUrl"].startswith("data:image/jpeg;base64,")


def test_simulate_hair_unknown_strategy(client, portrait_png):
    response = client.post(
        "/simulate-hair",
        files={"file": ("face.png", portrait_png, "image/png")},
        data={"color": "#B22222", "strategy": "neural"},
    )
    assert response.status_code == 400


def test_verify_password(client):
    ok = client.post("/api/verify-password", json={"accessPassword": PASSWORD})
    assert ok.status_code == 200
    assert ok.json() == {"success": True, "message": "Password verified.", "googleApiConfigured": True}

    wrong = client.post("/api/verify-password", json={"accessPassword": "guess"})
    assert wrong.status_code == 401
    assert wrong.json()["errorType"] == "credential"


def test_verify_password_without_server_password(client, monkeypatch):
    monkeypatch.setattr(main, "settings", Settings())
    response = client.post("/api/verify-password", json={"accessPassword": ""})
    assert response.status_code == 500
    assert response.json()["errorType"] == "config"


def test_generate_hair_success(client, monkeypatch, png_b64):
    http = fake_upstream(monkeypatch, FakeResponse(200, gemini_reply(
        {"inlineData": {"mimeType": "image/png", "data": png_b64}})))

    response = client.post("/api/generate-hair", json={
        "image": "data:image/png;base64," + png_b64,
        "prompt": "warm copper",
        "color": "copper brown",
        "accessPassword": PASSWORD,
    })

    assert response.status_code == 200
    assert response.json() == {"success": True, "imageUrl": "data:image/png;base64," + png_b64}
    assert len(http.calls) == 1


def test_generate_hair_refusal_is_parse_error(client, monkeypatch, png_b64):
    fake_upstream(monkeypatch, FakeResponse(200, gemini_reply({"text": "I cannot edit this photo."})))

    response = client.post("/api/generate-hair", json={
        "image": png_b64, "color": "black", "accessPassword": PASSWORD,
    })

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["errorType"] == "parse"
    assert "I cannot edit this photo." in body["error"]


def test_generate_hair_upstream_error_is_transport(client, monkeypatch):
    fake_upstream(monkeypatch, FakeResponse(503, {"error": "busy"}, text="busy"))

    response = client.post("/api/generate-hair", json={
        "image": "abc", "color": "black", "accessPassword": PASSWORD,
    })

    assert response.status_code == 500
    assert response.json()["errorType"] == "transport"


def test_generate_hair_wrong_password_never_calls_upstream(client, monkeypatch):
    http = fake_upstream(monkeypatch)
    response = client.post("/api/generate-hair", json={
        "image": "abc", "color": "black", "accessPassword": "guess",
    })
    assert response.status_code == 401
    assert http.calls == []


def test_generate_hair_without_api_key(client, monkeypatch):
    monkeypatch.setattr(main, "settings", Settings(access_password=PASSWORD))
    response = client.post("/api/generate-hair", json={
        "image": "abc", "color": "black", "accessPassword": PASSWORD,
    })
    assert response.status_code == 500
    assert response.json()["errorType"] == "config"


def test_generate_fashion(client, monkeypatch, png_b64):
    http = fake_upstream(monkeypatch, FakeResponse(200, gemini_reply(
        {"inline_data": {"mime_type": "image/png", "data": png_b64}})))

    response = client.post("/api/generate-fashion", json={
        "image": png_b64, "targetColor": "navy", "accessPassword": PASSWORD,
    })

    assert response.status_code == 200
    assert response.json()["imageUrl"].endswith(png_b64)
    assert "gemini-2.5-flash-image" in http.calls[0][1]


def test_list_models(client, monkeypatch):
    fake_upstream(monkeypatch,
                  FakeResponse(200, {"models": [{"name": "models/a"}]}),
                  FakeResponse(200, {"models": []}))

    response = client.post("/api/list-models", json={"accessPassword": PASSWORD})

    assert response.status_code == 200
    assert response.json()["models"]["v1beta"]["models"] == [{"name": "models/a"}]
    assert response.json()["models"]["v1"] == {"models": []}


@pytest.mark.parametrize("color", ["red", "#12345", "#GGGGGG"])
def test_simulate_hair_rejects_unparsable_color(client, portrait_png, color):
    before = main.analytics['local_simulations']
    response = client.post(
        "/simulate-hair",
        files={"file": ("face.png", portrait_png, "image/png")},
        data={"color": color},
    )
    assert response.status_code == 400
    assert "Invalid color" in response.json()["detail"]
    assert main.analytics['local_simulations'] == before
