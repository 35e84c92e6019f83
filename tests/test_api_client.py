import pytest
import requests
from PIL import Image

from qrthis.api_client import (
    ART_STYLES,
    ArtResult,
    BaseArtClient,
    GatewayArtClient,
    LocalImageClient,
    background_prompt,
    call_with_timeout,
    generate_art_qr,
    get_client,
)
from qrthis.errors import (
    ArtCreditsExhaustedError,
    ArtGenerationError,
    ArtRateLimitError,
    ArtServiceNotConfigured,
)
from qrthis.qr_generator import to_data_url


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self.ok = status_code < 400
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.posts = []

    def post(self, url, headers=None, json=None, timeout=None):
        self.posts.append({"url": url, "headers": headers, "json": json})
        if self.error:
            raise self.error
        return self.response


def gateway_payload(image_url):
    return {"choices": [{"message": {"images": [{"image_url": {"url": image_url}}]}}]}


class FakeArtClient(BaseArtClient):
    def __init__(self, image):
        self.image = image
        self.styles = []

    def name(self):
        return "fake"

    def generate(self, style, qr_image):
        self.styles.append(style)
        return self.image


def test_styles():
    assert list(ART_STYLES) == ["watercolor", "minimalist", "cyberpunk", "vintage", "corporate", "nature"]
    assert "512x512" in background_prompt("vintage")
    assert background_prompt("nature").startswith(ART_STYLES["nature"].prompt)


class TestGatewayClient:
    def test_missing_key(self):
        with pytest.raises(ArtServiceNotConfigured, match="AI service not configured"):
            GatewayArtClient(api_key="")

    def test_success_with_data_url(self, background):
        session = FakeSession(FakeResponse(payload=gateway_payload(to_data_url(background))))
        client = GatewayArtClient("key", gateway_url="https://gw.test/v1", model="m", session=session)

        image = client.generate("cyberpunk", Image.new("RGB", (10, 10)))

        assert image.size == background.size
        sent = session.posts[0]
        assert sent["url"] == "https://gw.test/v1"
        assert sent["headers"]["Authorization"] == "Bearer key"
        assert sent["json"]["modalities"] == ["image", "text"]
        assert sent["json"]["model"] == "m"
        assert sent["json"]["messages"][0]["content"] == background_prompt("cyberpunk")

    @pytest.mark.parametrize("status,error,code", [
        (429, ArtRateLimitError, 429),
        (402, ArtCreditsExhaustedError, 402),
        (500, ArtGenerationError, 500),
    ])
    def test_http_errors(self, status, error, code):
        session = FakeSession(FakeResponse(status_code=status, text="nope"))
        client = GatewayArtClient("key", session=session)
        with pytest.raises(error) as excinfo:
            client.generate("watercolor", Image.new("RGB", (10, 10)))
        assert excinfo.value.status_code == code
        assert len(session.posts) == 1

    def test_rate_limit_message(self):
        client = GatewayArtClient("key", session=FakeSession(FakeResponse(status_code=429)))
        with pytest.raises(ArtRateLimitError, match="Rate limit exceeded. Please try again in a moment."):
            client.generate("watercolor", Image.new("RGB", (10, 10)))

    def test_response_without_image(self):
        session = FakeSession(FakeResponse(payload={"choices": [{"message": {"content": "sorry"}}]}))
        client = GatewayArtClient("key", session=session)
        with pytest.raises(ArtGenerationError, match="No background was generated"):
            client.generate("watercolor", Image.new("RGB", (10, 10)))

    def test_network_failure(self):
        client = GatewayArtClient("key", session=FakeSession(error=requests.ConnectionError("down")))
        with pytest.raises(ArtGenerationError, match="Failed to generate background"):
            client.generate("watercolor", Image.new("RGB", (10, 10)))


def test_local_image_client(tmp_path, background):
    path = tmp_path / "art.png"
    background.save(path)
    client = LocalImageClient(str(path))
    assert client.generate("nature", Image.new("RGB", (128, 128))).size == (128, 128)


def test_call_with_timeout():
    assert call_with_timeout(lambda: 42, timeout=5) == 42

    def fail():
        raise RuntimeError("space crashed")

    with pytest.raises(ArtGenerationError, match="space crashed"):
        call_with_timeout(fail, timeout=5)


class TestGenerateArtQr:
    def test_composites_background(self, background):
        client = FakeArtClient(background)
        result = generate_art_qr("  https://example.com  ", "watercolor", client, size=256)

        assert isinstance(result, ArtResult)
        assert result.image.size == (256, 256)
        assert client.styles == ["watercolor"]
        payload = result.to_dict()
        assert set(payload) == {"imageUrl", "style", "message"}
        assert payload["imageUrl"].startswith("data:image/png;base64,")
        assert payload["style"] == "watercolor"
        assert payload["message"] == "AI Art QR code generated successfully"

    def test_finished_art_is_used_as_is(self, background):
        client = FakeArtClient(background)
        client.returns_background = False
        result = generate_art_qr("hello", "nature", client, size=100)
        assert result.image.size == (100, 100)

    @pytest.mark.parametrize("content,style,message", [
        ("", "watercolor", "Content is required"),
        ("   ", "watercolor", "Content is required"),
        ("hello", "pastel", "Invalid style selected"),
    ])
    def test_rejects_bad_input(self, background, content, style, message):
        with pytest.raises(ValueError, match=message):
            generate_art_qr(content, style, FakeArtClient(background))


def test_get_client():
    assert isinstance(get_client("local", image_path="x.png"), LocalImageClient)
    assert isinstance(get_client("gateway", api_key="k"), GatewayArtClient)
    with pytest.raises(ValueError, match="Unknown backend"):
        get_client("replicate")
