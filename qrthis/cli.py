"""CLI entry point for QRThis."""

import argparse
import sys
import time

from qrthis import __version__


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qrthis",
        description="Smart QR code generator: optimizes content, picks error correction, "
                    "validates input and can dress codes up with AI art.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Plain QR code, optimized and validated
  qrthis generate "https://www.example.com/menu" -o menu.png

  # WiFi join code
  qrthis wifi Cafe_Main --password coffee123 -o wifi.png

  # One QR code per line of a file, bundled in a ZIP
  qrthis batch links.txt --zip codes.zip

  # AI art background composited with a scannable code
  qrthis art "https://example.com" --style watercolor -o art.png

  # Serve the art endpoint over HTTP
  qrthis serve --port 8080
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="YAML config file (default: $QRTHIS_CONFIG or qrthis.yaml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log debug output",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    # generate
    p = sub.add_parser("generate", help="Generate a QR code from text, a URL, an email or a phone number")
    p.add_argument("text", help="Content to encode")
    p.add_argument("--output", "-o", default="qrthis.png", help="Output PNG path (default: qrthis.png)")
    p.add_argument("--no-optimize", action="store_true", help="Encode the text exactly as given")
    p.add_argument("--shorten", action="store_true", help="Shorten long URLs through TinyURL first")
    p.add_argument("--foreground", default=None, help="Module color, e.g. #000000")
    p.add_argument("--background", default=None, help="Background color, e.g. #FFFFFF")
    p.add_argument("--width", type=int, default=None, help="Image width in pixels")

    # wifi
    p = sub.add_parser("wifi", help="Generate a WiFi join QR code")
    p.add_argument("ssid", help="Network name")
    p.add_argument("--password", default="", help="Network password")
    p.add_argument("--security", default="WPA", choices=["WPA", "WEP", "nopass"], help="Default: WPA")
    p.add_argument("--output", "-o", default="wifi.png", help="Output PNG path (default: wifi.png)")

    # contact
    p = sub.add_parser("contact", help="Generate a vCard contact QR code")
    p.add_argument("name", help="Full name")
    p.add_argument("--phone", default=None)
    p.add_argument("--email", default=None)
    p.add_argument("--organization", default=None)
    p.add_argument("--output", "-o", default="contact.png", help="Output PNG path (default: contact.png)")

    # batch
    p = sub.add_parser("batch", help="Generate one QR code per line, comma or semicolon separated entry of a file")
    p.add_argument("input", help="Text file, or - for stdin")
    p.add_argument("--output-dir", "-d", default="qrthis-batch", help="Directory for PNG files")
    p.add_argument("--zip", default=None, help="Write a single ZIP archive instead of a directory")

    # art
    from qrthis.api_client import ART_STYLES
    p = sub.add_parser("art", help="Generate an AI-stylized QR code")
    p.add_argument("content", help="Content to encode")
    p.add_argument("--style", required=True, choices=list(ART_STYLES), help="Art style")
    p.add_argument(
        "--backend",
        default=None,
        choices=["gateway", "huggingface", "local"],
        help="Art backend (default: from config, normally gateway)",
    )
    p.add_argument("--image", default=None, help="Background image for --backend local")
    p.add_argument(
        "--mode",
        default="overlay",
        choices=["overlay", "tinted"],
        help="overlay: code on a plate over the art; tinted: art colors the modules",
    )
    p.add_argument("--size", type=int, default=512, help="Output size in pixels. Default: 512")
    p.add_argument("--output", "-o", default="qrthis-art.png", help="Output image path")
    p.add_argument("--no-verify", action="store_true", help="Skip QR code scannability verification")

    # chat
    p = sub.add_parser("chat", help="Talk to the QR assistant")
    p.add_argument("--message", "-m", default=None, help="Send one message and exit")
    p.add_argument("--output", "-o", default=None, help="Save the last suggested QR code here")

    # colors
    p = sub.add_parser("colors", help="Suggest brand colors for a URL or check a color pair")
    p.add_argument("url", nargs="?", default=None, help="Website to take brand colors from")
    p.add_argument("--check", nargs=2, metavar=("FOREGROUND", "BACKGROUND"), help="Check contrast of a pair")

    # analyze
    p = sub.add_parser("analyze", help="Explain how content would be encoded")
    p.add_argument("text", help="Content to analyze")

    # shorten
    p = sub.add_parser("shorten", help="Shorten a URL through TinyURL")
    p.add_argument("url")

    # notify
    p = sub.add_parser("notify", help="Sign up to hear about an upcoming feature")
    p.add_argument("email")
    p.add_argument("--feature", required=True, help="Feature to be notified about")
    p.add_argument("--name", default=None)
    p.add_argument("--phone", default=None)

    # serve
    p = sub.add_parser("serve", help="Serve the AI art HTTP endpoint")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=8080)
    p.add_argument("--backend", default=None, choices=["gateway", "huggingface"])

    return parser


def _error(message) -> int:
    print(f"\n  ERROR: {message}", file=sys.stderr)
    return 1


def _art_client_kwargs(config, backend: str, image: str | None = None) -> dict:
    if backend == "gateway":
        return {
            "api_key": config.art.api_key,
            "gateway_url": config.art.gateway_url,
            "model": config.art.model,
            "timeout": config.art.timeout,
        }
    if backend == "local":
        return {"image_path": image}
    return {}


def cmd_generate(args, config) -> int:
    from qrthis.generator import QRGeneratorSession, SecureQRGenerator
    from qrthis.optimization import (
        detect_content_type,
        get_content_label,
        get_content_tips,
        get_error_correction_explanation,
        get_optimal_error_correction,
        optimize_text,
    )
    from qrthis.qr_generator import image_from_data_url, save_qr_image
    from qrthis.storage import LocalStore
    from qrthis.url_shortening import get_url_optimization_benefit, shorten_url, should_shorten_url

    text = args.text
    if not args.no_optimize:
        result = optimize_text(text)
        if result.saved > 0:
            print(f"  ✓ Optimized: saved {result.saved} characters")
        text = result.optimized

    content_type = detect_content_type(text)
    if args.shorten and content_type == "url" and should_shorten_url(text):
        short = shorten_url(text)
        if short != text:
            benefit = get_url_optimization_benefit(text, short)
            print(f"  ✓ Shortened: {short} ({benefit.percent_saved}% shorter, "
                  f"{benefit.scan_improvement} scanning)")
            text = short

    level = get_optimal_error_correction(text)
    print(f"  Content:          {get_content_label(content_type)}")
    print(f"  Error correction: {get_error_correction_explanation(level)}")

    session = QRGeneratorSession(
        store=LocalStore(config.storage.store_path),
        max_characters=config.generator.max_characters,
        width=args.width or config.generator.width,
        margin=config.generator.margin,
        foreground=args.foreground or config.generator.foreground,
        background=args.background or config.generator.background,
    )
    secure = SecureQRGenerator(session, min_interval=config.security.min_interval)
    try:
        data_url = secure.generate(text, content_type)
        if data_url is None:
            return _error(secure.security_error)
        if not data_url:
            return _error(session.error or "Nothing to encode")

        path = save_qr_image(image_from_data_url(data_url), args.output)
        print(f"  ✓ Saved: {path}")

        tip = get_content_tips(content_type)
        if tip:
            print(f"\n  💡 {tip}")
        for tip in session.personalized_tips:
            print(f"  💡 {tip}")
        return 0
    finally:
        session.close()


def _save_structured(content: str, output: str, config) -> int:
    from qrthis.errors import QRGenerationError
    from qrthis.optimization import get_optimal_error_correction
    from qrthis.qr_generator import generate_qr_code, save_qr_image

    try:
        image = generate_qr_code(
            content,
            error_correction=get_optimal_error_correction(content),
            width=config.generator.width,
            margin=config.generator.margin,
            foreground=config.generator.foreground,
            background=config.generator.background,
        )
    except QRGenerationError as e:
        return _error(e)
    print(f"  ✓ Saved: {save_qr_image(image, output)}")
    return 0


def cmd_wifi(args, config) -> int:
    from qrthis.formatters import format_wifi
    from qrthis.security import validate_wifi_network

    validation = validate_wifi_network(args.ssid, args.password, args.security)
    if not validation.is_valid:
        return _error(validation.error)

    password = "" if args.security == "nopass" else args.password.strip()
    return _save_structured(format_wifi(args.ssid.strip(), password, args.security), args.output, config)


def cmd_contact(args, config) -> int:
    from qrthis.formatters import format_vcard
    from qrthis.security import validate_email, validate_phone

    if not args.name.strip():
        return _error("Name is required")
    if args.email:
        validation = validate_email(args.email)
        if not validation.is_valid:
            return _error(validation.error)
    if args.phone:
        validation = validate_phone(args.phone)
        if not validation.is_valid:
            return _error(validation.error)

    vcard = format_vcard(args.name.strip(), args.phone, args.email, args.organization)
    return _save_structured(vcard, args.output, config)


def cmd_batch(args, config) -> int:
    from qrthis.batch import count_batch_items, generate_batch, parse_batch_content, write_batch, write_batch_zip
    from qrthis.errors import QRGenerationError

    if args.input == "-":
        text = sys.stdin.read()
    else:
        with open(args.input, "r", encoding="utf-8") as f:
            text = f.read()

    count = count_batch_items(text)
    if count == 0:
        return _error("No content to generate")

    print(f"\n[1/2] Generating {count} QR codes...")
    items = parse_batch_content(text)
    try:
        generate_batch(
            items,
            width=config.generator.width,
            margin=config.generator.margin,
            foreground=config.generator.foreground,
            background=config.generator.background,
        )
    except QRGenerationError as e:
        return _error(e)

    if args.zip:
        print(f"\n[2/2] Writing archive: {args.zip}")
        write_batch_zip(items, args.zip)
        print(f"  ✓ Saved {len(items)} codes to {args.zip}")
    else:
        print(f"\n[2/2] Writing files to: {args.output_dir}")
        for path in write_batch(items, args.output_dir):
            print(f"  ✓ {path}")
    return 0


def cmd_art(args, config) -> int:
    from qrthis.api_client import ART_STYLES, Spinner, generate_art_qr, get_client
    from qrthis.compose import BlendMode
    from qrthis.errors import ArtGenerationError, QRGenerationError
    from qrthis.image_utils import VerifyResult, save_output, verify_qr_scannable

    backend = args.backend or config.art.backend
    if backend == "local" and not args.image:
        return _error("--image is required with --backend local")

    print(f"\n[1/3] Connecting to {backend} backend...")
    try:
        client = get_client(backend, **_art_client_kwargs(config, backend, args.image))
        print(f"  Backend: {client.name()}")
    except (ArtGenerationError, ValueError) as e:
        return _error(e)

    style = ART_STYLES[args.style]
    print(f"\n[2/3] Generating {style.name} art QR code...")
    start_time = time.time()
    try:
        with Spinner(f"Painting {style.name.lower()} background..."):
            result = generate_art_qr(
                args.content, args.style, client, mode=BlendMode(args.mode), size=args.size
            )
    except (ArtGenerationError, QRGenerationError, ValueError, FileNotFoundError) as e:
        return _error(e)
    print(f"  ✓ {result.message} in {time.time() - start_time:.1f}s")

    print(f"\n[3/3] Saving output to: {args.output}")
    output_path = save_output(result.image, args.output)
    print(f"  ✓ Saved: {output_path}")

    if not args.no_verify:
        print("\n  Verifying QR code scannability...")
        verdict, decoded = verify_qr_scannable(result.image)
        if verdict == VerifyResult.SCANNABLE:
            print(f"  ✓ QR code is SCANNABLE! Decoded: {decoded}")
        elif verdict == VerifyResult.SKIPPED:
            print("  ⊘ Verification skipped (pyzbar not installed)")
            print("    Install with: pip install qrthis[verify]")
        else:
            print("  ⚠️  WARNING: QR code may not be scannable.")
            print("     Try --mode overlay or a lighter style.")
    return 0


def cmd_chat(args, config) -> int:
    from qrthis.assistant import GREETING, QRAssistant

    assistant = QRAssistant()

    if args.message is not None:
        messages = [args.message]
    else:
        print(f"\n🤖 {GREETING}\n   (empty line or Ctrl-D to quit)")
        messages = None

    while True:
        if messages is not None:
            if not messages:
                break
            text = messages.pop(0)
        else:
            try:
                text = input("\n> ")
            except EOFError:
                break
            if not text.strip():
                break

        reply = assistant.send(text)
        if reply is None:
            continue
        print(f"\n🤖 {reply.content}")
        if reply.generated_content:
            print(f"\n   QR content: {reply.generated_content}")

    if args.output and assistant.generated_content:
        return _save_structured(assistant.generated_content, args.output, config)
    return 0


def cmd_colors(args, config) -> int:
    from qrthis.brand_colors import extract_brand_colors, generate_qr_color_suggestions, validate_qr_colors

    if args.check:
        fg, bg = args.check
        validation = validate_qr_colors(fg, bg)
        mark = "✓" if validation.is_valid else "⚠️ "
        print(f"  {mark} Contrast {validation.contrast}:1 ({validation.accessibility})")
        print(f"    {validation.recommendation}")
        return 0 if validation.is_valid else 1

    if not args.url:
        return _error("Give a URL or --check FOREGROUND BACKGROUND")

    brand = extract_brand_colors(args.url)
    if brand is None:
        return _error(f"Not a URL: {args.url}")

    print(f"  Palette ({brand.source}): {', '.join(brand.palette)}")
    for suggestion in generate_qr_color_suggestions(brand):
        v = suggestion.validation
        print(f"  {suggestion.foreground} on {suggestion.background}  "
              f"{v.contrast:>5}:1  {v.accessibility:<4}  {suggestion.name}")
    return 0


def cmd_analyze(args, config) -> int:
    from qrthis.brand_colors import extract_brand_colors
    from qrthis.context import detect_qr_context, get_context_icon, get_context_label
    from qrthis.optimization import (
        detect_content_type,
        get_content_label,
        get_content_tips,
        get_error_correction_explanation,
        get_optimal_error_correction,
        optimize_text,
    )
    from qrthis.url_shortening import should_shorten_url

    text = args.text
    content_type = detect_content_type(text)
    level = get_optimal_error_correction(text)
    optimized = optimize_text(text)

    print(f"  Content:          {get_content_label(content_type)} ({content_type})")
    print(f"  Length:           {len(text)} characters")
    print(f"  Error correction: {level} - {get_error_correction_explanation(level)}")
    if optimized.saved > 0:
        print(f"  Optimized:        {optimized.optimized} (saves {optimized.saved})")

    context = detect_qr_context(text)
    if context is not None:
        print(f"  Context:          {get_context_icon(context.type)} {get_context_label(context.type)} "
              f"({context.confidence:.0%})")
        for tip in context.optimizations.tips:
            print(f"    • {tip}")

    if content_type == "url":
        if should_shorten_url(text):
            print("  💡 This URL is long; `qrthis shorten` would make the code easier to scan.")
        brand = extract_brand_colors(text)
        if brand is not None:
            print(f"  Brand colors:     {brand.primary} / {brand.secondary}")

    tip = get_content_tips(content_type)
    if tip:
        print(f"  💡 {tip}")
    return 0


def cmd_shorten(args, config) -> int:
    from qrthis.url_shortening import get_url_optimization_benefit, is_valid_url, shorten_url

    if not is_valid_url(args.url):
        return _error(f"Invalid URL: {args.url}")

    short = shorten_url(args.url)
    if short == args.url:
        return _error("Could not shorten URL")

    benefit = get_url_optimization_benefit(args.url, short)
    print(short)
    print(f"  Saved {benefit.chars_saved} characters ({benefit.percent_saved}%), "
          f"{benefit.scan_improvement} scanning", file=sys.stderr)
    return 0


def cmd_notify(args, config) -> int:
    from qrthis.errors import DuplicateSignupError, RateLimitExceeded, SignupValidationError
    from qrthis.signups import SignupStore, submit_signup
    from qrthis.storage import LocalStore

    store = SignupStore(config.storage.signups_path)
    try:
        submit_signup(
            store,
            LocalStore(config.storage.store_path),
            args.email,
            args.feature,
            name=args.name,
            phone=args.phone,
            max_daily_requests=config.security.signup_max_requests,
        )
    except SignupValidationError as e:
        for field_name, message in e.errors.items():
            print(f"  {field_name}: {message}", file=sys.stderr)
        return _error("Please check the highlighted fields")
    except DuplicateSignupError:
        print("  You're already on the list for this feature.")
        return 0
    except RateLimitExceeded as e:
        return _error(e)
    finally:
        store.close()

    print(f"  ✓ You're on the list! We'll email {args.email.strip().lower()} about {args.feature}.")
    return 0


def cmd_serve(args, config) -> int:
    from qrthis.api_client import get_client
    from qrthis.server import create_app

    backend = args.backend or config.art.backend
    if backend == "local":
        return _error("The server needs the gateway or huggingface backend")

    def client_factory():
        return get_client(backend, **_art_client_kwargs(config, backend))

    origin = config.security.allowed_origins[0] if config.security.allowed_origins else "*"
    app = create_app(client_factory, allowed_origin=origin)
    print(f"  Serving POST /generate-art-qr on http://{args.host}:{args.port} ({backend})")
    app.run(host=args.host, port=args.port)
    return 0


COMMANDS = {
    "generate": cmd_generate,
    "wifi": cmd_wifi,
    "contact": cmd_contact,
    "batch": cmd_batch,
    "art": cmd_art,
    "chat": cmd_chat,
    "colors": cmd_colors,
    "analyze": cmd_analyze,
    "shorten": cmd_shorten,
    "notify": cmd_notify,
    "serve": cmd_serve,
}


def main(argv: list[str] | None = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    from qrthis.config import Config
    from qrthis.logger import setup_logger

    config = Config.load(args.config)
    if args.verbose:
        config.logging.level = "DEBUG"
    setup_logger(config)

    try:
        return COMMANDS[args.command](args, config)
    except (OSError, ValueError) as e:
        return _error(e)


if __name__ == "__main__":
    sys.exit(main())
