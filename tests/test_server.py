import pytest
from PIL import Image

from qrthis.api_client import BaseArtClient
from qrthis.errors import ArtCreditsExhaustedError, ArtRateLimitError, ArtServiceNotConfigured
from qrthis.server import create_app


class StubClient(BaseArtClient):
    def __init__(self, error=None):
        self.error = error

    def name(self):
        return "stub"

    def generate(self, style, qr_image):
        if self.error:
            raise self.error
        return Image.new("RGB", (64, 64), (30, 120, 90))


def make_client(client_factory):
    app = create_app(client_factory)
    app.testing = True
    return app.test_client()


@pytest.fixture
def client():
    return make_client(StubClient)


def test_generates_art_qr(client):
    response = client.post("/generate-art-qr", json={"content": "https://example.com", "style": "nature"})
    assert response.status_code == 200
    body = response.get_json()
    assert body["style"] == "nature"
    assert body["message"] == "AI Art QR code generated successfully"
    assert body["imageUrl"].startswith("data:image/png;base64,")
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_preflight(client):
    response = client.open("/generate-art-qr", method="OPTIONS")
    assert response.status_code == 204
    assert response.headers["Access-Control-Allow-Headers"] == (
        "authorization, x-client-info, apikey, content-type"
    )


@pytest.mark.parametrize("payload,error", [
    ({"style": "nature"}, "Content is required"),
    ({"content": "   ", "style": "nature"}, "Content is required"),
    ({"content": "hi"}, "Invalid style selected"),
    ({"content": "hi", "style": "pastel"}, "Invalid style selected"),
])
def test_bad_input(client, payload, error):
    response = client.post("/generate-art-qr", json=payload)
    assert response.status_code == 400
    assert response.get_json() == {"error": error}


def test_non_json_body(client):
    response = client.post("/generate-art-qr", data="nope", content_type="text/plain")
    assert response.status_code == 400


@pytest.mark.parametrize("payload", [[1, 2], "make me art", 5])
def test_json_body_that_is_not_an_object(client, payload):
    response = client.post("/generate-art-qr", json=payload)
    assert response.status_code == 400
    assert response.get_json() == {"error": "Content is required"}


@pytest.mark.parametrize("error,status", [
    (ArtRateLimitError("Rate limit exceeded. Please try again in a moment."), 429),
    (ArtCreditsExhaustedError("AI credits exhausted. Please add credits to continue."), 402),
    (RuntimeError("boom"), 500),
])
def test_upstream_errors(error, status):
    client = make_client(lambda: StubClient(error))
    response = client.post("/generate-art-qr", json={"content": "hi", "style": "vintage"})
    assert response.status_code == status
    assert response.get_json() == {"error": str(error)}


def test_not_configured():
    def factory():
        raise ArtServiceNotConfigured("AI service not configured")

    response = make_client(factory).post("/generate-art-qr", json={"content": "hi", "style": "vintage"})
    assert response.status_code == 500
    assert response.get_json() == {"error": "AI service not configured"}


def test_styles_and_health(client):
    styles = client.get("/styles").get_json()
    assert [s["id"] for s in styles][:2] == ["watercolor", "minimalist"]
    assert client.get("/health").get_json() == {"status": "ok"}
