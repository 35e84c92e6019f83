"""Cloud API clients for AI-stylized QR codes."""

import io
import logging
import sys
import tempfile
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

import requests
from PIL import Image

from qrthis.compose import BlendMode, compose_art_qr
from qrthis.errors import (
    ArtCreditsExhaustedError,
    ArtGenerationError,
    ArtRateLimitError,
    ArtServiceNotConfigured,
)
from qrthis.image_utils import cleanup_temp_files, load_and_resize_image
from qrthis.qr_generator import generate_qr_code, image_from_data_url, to_data_url

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Art styles
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ArtStyle:
    id: str
    name: str
    description: str
    prompt: str


_NO_CONTENT = "No text or QR codes."

ART_STYLES = {
    style.id: style
    for style in (
        ArtStyle(
            "watercolor", "Watercolor", "Soft, flowing artistic strokes",
            "Create a beautiful square artistic background with soft watercolor painting "
            "style. Use flowing brush strokes with pastel colors (soft pinks, blues, purples, "
            "greens). Include subtle paint splatter effects and color gradients. The center "
            "area should be slightly lighter to allow content placement. " + _NO_CONTENT,
        ),
        ArtStyle(
            "minimalist", "Minimalist", "Clean geometric patterns",
            "Create a clean minimalist square background design with subtle geometric "
            "patterns. Use a crisp white or light gray background with very subtle geometric "
            "shapes (circles, triangles, thin lines) as decorative elements around the edges. "
            "The center should remain clean and uncluttered. Modern and elegant aesthetic. "
            + _NO_CONTENT,
        ),
        ArtStyle(
            "cyberpunk", "Cyberpunk", "Neon lights and circuits",
            "Create a cyberpunk-styled square background with neon glow effects. Use a dark "
            "background (deep purple or dark blue) with glowing neon accents in cyan and pink. "
            "Add circuit board patterns and digital grid lines. Include subtle neon light "
            "reflections around the edges. The center should be darker for content placement. "
            + _NO_CONTENT,
        ),
        ArtStyle(
            "vintage", "Vintage", "Classic retro aesthetics",
            "Create a vintage-styled square background with a sepia-toned aesthetic. Use an "
            "aged paper or parchment texture. Add ornate decorative borders and vintage "
            "flourishes around the edges. Include subtle coffee stain effects and weathered "
            "textures. The center should be cleaner for content placement. " + _NO_CONTENT,
        ),
        ArtStyle(
            "corporate", "Corporate", "Professional and sleek",
            "Create a professional corporate-styled square background. Use a clean gradient "
            "(subtle blue to purple or teal to blue). Add modern geometric accents and subtle "
            "professional patterns around the edges. Keep the center area clean and minimal. "
            "Sleek and professional look. " + _NO_CONTENT,
        ),
        ArtStyle(
            "nature", "Nature", "Organic botanical vibes",
            "Create a nature-themed square background with organic botanical elements. Use "
            "soft green and earth tones. Add subtle leaf patterns, vine decorations, and "
            "natural textures around the edges. Include organic shapes and botanical "
            "illustrations. The center should be lighter for content placement. " + _NO_CONTENT,
        ),
    )
}


def background_prompt(style: str, size: int = 512) -> str:
    return (
        f"{ART_STYLES[style].prompt} The image should be exactly {size}x{size} pixels, "
        "high quality, artistic."
    )


# ---------------------------------------------------------------------------
# Spinner for visual feedback during long API calls
# ---------------------------------------------------------------------------

class Spinner:
    """Simple terminal spinner for long-running operations."""

    FRAMES = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]

    def __init__(self, message: str = "Generating..."):
        self._message = message
        self._running = False
        self._thread: threading.Thread | None = None

    def start(self) -> "Spinner":
        self._running = True
        self._thread = threading.Thread(target=self._spin, daemon=True)
        self._thread.start()
        return self

    def stop(self, final_message: str = "") -> None:
        self._running = False
        if self._thread:
            self._thread.join()
        sys.stderr.write("\r\033[K")
        if final_message:
            sys.stderr.write(f"  {final_message}\n")
        sys.stderr.flush()

    def __enter__(self) -> "Spinner":
        return self.start()

    def __exit__(self, *exc) -> None:
        self.stop()

    def _spin(self) -> None:
        idx = 0
        start = time.time()
        while self._running:
            frame = self.FRAMES[idx % len(self.FRAMES)]
            elapsed = time.time() - start
            sys.stderr.write(f"\r  {frame} {self._message} ({elapsed:.0f}s)")
            sys.stderr.flush()
            time.sleep(0.1)
            idx += 1


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

DEFAULT_TIMEOUT_SECONDS = 120


class BaseArtClient(ABC):
    """Abstract base class for AI art backends."""

    #: Whether the returned image still needs the QR code laid over it.
    returns_background = True

    @abstractmethod
    def generate(self, style: str, qr_image: Image.Image) -> Image.Image:
        """Produce artwork for ``style``.

        Args:
            style: A key of ``ART_STYLES``.
            qr_image: The QR code the art is made for. Background-only
                backends ignore it.

        Returns:
            The generated image.
        """
        ...

    @abstractmethod
    def name(self) -> str:
        ...


# ---------------------------------------------------------------------------
# AI gateway client (OpenAI-compatible multimodal chat completions)
# ---------------------------------------------------------------------------

class GatewayArtClient(BaseArtClient):
    """Paint a style background through a multimodal chat-completions gateway.

    The request asks for ``modalities: ["image", "text"]`` and the image
    comes back as a data URL in ``choices[0].message.images[0]``.
    Failures are classified, never retried: 429 means rate limited, 402
    means the account is out of credits.
    """

    DEFAULT_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"
    DEFAULT_MODEL = "google/gemini-2.5-flash-image-preview"

    def __init__(
        self,
        api_key: str | None,
        gateway_url: str = DEFAULT_URL,
        model: str = DEFAULT_MODEL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        if not api_key:
            raise ArtServiceNotConfigured("AI service not configured")
        self._api_key = api_key
        self._url = gateway_url
        self._model = model
        self._timeout = timeout
        self._http = session or requests.Session()

    def name(self) -> str:
        return f"AI gateway ({self._model})"

    def generate(self, style: str, qr_image: Image.Image) -> Image.Image:
        logger.info("Generating %s background via %s", style, self._url)
        try:
            response = self._http.post(
                self._url,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": self._model,
                    "messages": [{"role": "user", "content": background_prompt(style)}],
                    "modalities": ["image", "text"],
                },
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.error("AI gateway unreachable: %s", e)
            raise ArtGenerationError("Failed to generate background") from e

        if not response.ok:
            logger.error("AI gateway error: %s %s", response.status_code, response.text[:500])
            if response.status_code == 429:
                raise ArtRateLimitError("Rate limit exceeded. Please try again in a moment.")
            if response.status_code == 402:
                raise ArtCreditsExhaustedError("AI credits exhausted. Please add credits to continue.")
            raise ArtGenerationError("Failed to generate background")

        try:
            data = response.json()
            image_url = data["choices"][0]["message"]["images"][0]["image_url"]["url"]
        except (ValueError, KeyError, IndexError, TypeError):
            logger.error("No image in response: %s", response.text[:500])
            raise ArtGenerationError("No background was generated. Please try again.")

        return self._load_image(image_url)

    def _load_image(self, image_url: str) -> Image.Image:
        if image_url.startswith("data:"):
            try:
                return image_from_data_url(image_url)
            except (ValueError, OSError) as e:
                raise ArtGenerationError("The generated background could not be decoded.") from e

        try:
            response = self._http.get(image_url, timeout=self._timeout)
            response.raise_for_status()
            return Image.open(io.BytesIO(response.content)).convert("RGB")
        except (requests.RequestException, OSError) as e:
            raise ArtGenerationError("The generated background could not be downloaded.") from e


# ---------------------------------------------------------------------------
# HuggingFace client
# ---------------------------------------------------------------------------

class HuggingFaceClient(BaseArtClient):
    """Client for the HuggingFace QR-code-AI-art-generator space.

    Uses the Gradio client to call the public space. No API key required.
    The space blends the QR pattern into the artwork itself, so its output
    is used as-is.
    """

    SPACE_ID = "huggingface-projects/QR-code-AI-art-generator"
    returns_background = False

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SECONDS * 2):
        self._timeout = timeout
        try:
            from gradio_client import Client
            self._client = Client(self.SPACE_ID)
        except Exception as e:
            raise ArtGenerationError(
                f"Failed to connect to HuggingFace space '{self.SPACE_ID}': {e}"
            ) from e

    def name(self) -> str:
        return "HuggingFace (QR-code-AI-art-generator)"

    def generate(self, style: str, qr_image: Image.Image) -> Image.Image:
        from gradio_client import handle_file

        tmp = tempfile.NamedTemporaryFile(suffix=".png", prefix="qrthis_art_", delete=False)
        qr_image.convert("RGB").save(tmp.name, "PNG")
        tmp.close()

        def _call():
            return self._client.predict(
                # Empty content: the space draws from our own QR image
                qr_code_content="",
                prompt=ART_STYLES[style].prompt,
                negative_prompt="ugly, disfigured, low quality, blurry, nsfw, text",
                guidance_scale=7.5,
                controlnet_conditioning_scale=1.3,
                strength=0.9,
                seed=-1,
                init_image=None,
                qrcode_image=handle_file(tmp.name),
                use_qr_code_as_init_image=True,
                sampler="DPM++ Karras SDE",
                api_name="/inference",
            )

        try:
            result_path = call_with_timeout(_call, self._timeout)
            with Image.open(result_path) as img:
                return img.convert("RGB")
        finally:
            cleanup_temp_files(tmp.name)


# ---------------------------------------------------------------------------
# Local image "client" (offline, your own artwork)
# ---------------------------------------------------------------------------

class LocalImageClient(BaseArtClient):
    """Use an image from disk as the background. Works offline."""

    def __init__(self, image_path: str):
        self._image_path = image_path

    def name(self) -> str:
        return f"Local image ({self._image_path})"

    def generate(self, style: str, qr_image: Image.Image) -> Image.Image:
        return load_and_resize_image(self._image_path, size=qr_image.size[0])


def call_with_timeout(fn, timeout: float):
    """Run ``fn`` in a worker thread, waiting at most ``timeout`` seconds.

    There is exactly one attempt. Errors from ``fn`` are re-raised as
    ``ArtGenerationError``.
    """
    result_container = [None]
    error_container: list[BaseException | None] = [None]

    def _run():
        try:
            result_container[0] = fn()
        except Exception as e:
            error_container[0] = e

    thread = threading.Thread(target=_run, daemon=True)
    thread.start()
    thread.join(timeout=timeout)

    if thread.is_alive():
        raise ArtGenerationError(
            f"API call timed out after {timeout:.0f}s. "
            "The space may be cold-starting or overloaded."
        )
    if error_container[0] is not None:
        raise ArtGenerationError(str(error_container[0])) from error_container[0]
    return result_container[0]


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

@dataclass
class ArtResult:
    image: Image.Image
    style: str
    message: str

    @property
    def image_url(self) -> str:
        return to_data_url(self.image)

    def to_dict(self) -> dict:
        return {"imageUrl": self.image_url, "style": self.style, "message": self.message}


def generate_art_qr(
    content: str,
    style: str,
    client: BaseArtClient,
    mode: BlendMode = BlendMode.OVERLAY,
    size: int = 512,
) -> ArtResult:
    """Create an AI-stylized QR code for ``content``.

    Raises:
        ValueError: If the content is empty or the style is unknown.
        ArtGenerationError: If the backend fails (see its subclasses).
    """
    if not content or not isinstance(content, str) or not content.strip():
        raise ValueError("Content is required")
    if style not in ART_STYLES:
        raise ValueError("Invalid style selected")

    content = content.strip()
    logger.info("Generating AI art QR: content=%r style=%s", content[:50], style)

    # High error correction survives the artwork around and under the code
    qr_image = generate_qr_code(content, error_correction="H", width=size, margin=4)
    art = client.generate(style, qr_image)

    if client.returns_background:
        image = compose_art_qr(content, art, qr_image, mode=mode, style=style, size=size)
    else:
        image = art.resize((size, size), Image.LANCZOS)

    return ArtResult(image=image, style=style, message="AI Art QR code generated successfully")


def get_client(backend: str = "gateway", **kwargs) -> BaseArtClient:
    """Factory function to get the appropriate art backend.

    Args:
        backend: One of "gateway", "huggingface" or "local".
        **kwargs: Passed to the client constructor.
    """
    clients = {
        "gateway": GatewayArtClient,
        "huggingface": HuggingFaceClient,
        "local": LocalImageClient,
    }

    if backend not in clients:
        raise ValueError(f"Unknown backend '{backend}'. Choose from: {', '.join(clients)}")

    return clients[backend](**kwargs)
