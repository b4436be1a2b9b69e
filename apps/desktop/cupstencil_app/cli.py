"""CLI entrypoints for rendering cup stencils and inspecting settings."""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict
from pathlib import Path

from cupstencil_core import configure_logging, get_logger, install_crash_hook, load_config, save_config
from cupstencil_core.config import config_path
from cupstencil_renderer import (
    CUP_HEIGHT,
    CUP_WIDTH,
    SAMPLE_NAMES,
    StencilError,
    StencilPipeline,
    build_sample_image,
    compute_pattern,
    load_image,
)
from cupstencil_renderer.models import FIT_MODES, TARGET_FORMATS, TONE_MODES


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _output_path(requested: str | None, source: str, extension: str) -> Path:
    if requested:
        path = Path(requested).expanduser()
        return path if path.suffix else path.with_suffix(extension)
    return Path(f"{Path(source).stem}-stencil{extension}")


def cmd_render(args: argparse.Namespace) -> int:
    cfg = load_config()
    logger = get_logger()

    try:
        options = cfg.render_options(
            tone_mode=args.tone_mode,
            threshold=args.threshold,
            sample_density=args.density,
            fit=args.fit,
            max_bytes=args.max_bytes,
            target_format=args.format,
        )
        if args.sample:
            source_name = args.sample
            image = build_sample_image(args.sample, width=1000, height=1000)
        else:
            source_name = args.input
            image = load_image(Path(args.input).expanduser())
        artifact = StencilPipeline().render(image, options)
    except StencilError as exc:
        logger.error(f"render failed: {exc}", extra={"event": "render_failed"})
        _print_json({"success": False, "error": str(exc), "error_type": type(exc).__name__})
        return 2

    out = _output_path(args.output, source_name, artifact.extension)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(artifact.data)

    _print_json(
        {
            "success": True,
            "output": str(out),
            "media_type": artifact.media_type,
            "bytes": artifact.size,
            "max_bytes": options.max_bytes,
            "within_budget": artifact.size <= options.max_bytes,
            "quality": artifact.quality,
            "quantize_step": artifact.quantize_step,
            "canvas": {"width": CUP_WIDTH, "height": CUP_HEIGHT},
            "options": asdict(options),
        }
    )
    return 0


def cmd_pattern(args: argparse.Namespace) -> int:
    pattern = compute_pattern(args.width, args.height)
    rank = [0] * len(pattern)
    for order, index in enumerate(pattern):
        rank[index] = order
    _print_json(
        {
            "width": args.width,
            "height": args.height,
            "order": list(pattern),
            "grid": [rank[y * args.width : (y + 1) * args.width] for y in range(args.height)],
        }
    )
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    cfg = load_config()
    payload = asdict(cfg)
    payload["path"] = str(config_path())
    if args.write:
        payload["path"] = str(save_config(cfg))
        payload["written"] = True
    _print_json(payload)
    return 0


def cmd_samples(_args: argparse.Namespace) -> int:
    _print_json(list(SAMPLE_NAMES))
    return 0


def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cupstencil", description="Cup printer stencil renderer")
    sub = parser.add_subparsers(dest="command", required=True)

    render_cmd = sub.add_parser("render", help="Render a photo into an upload-ready stencil")
    source = render_cmd.add_mutually_exclusive_group(required=True)
    source.add_argument("input", nargs="?", default=None, help="Path to the source image")
    source.add_argument("--sample", choices=list(SAMPLE_NAMES), default=None, help="Render a calibration image")
    render_cmd.add_argument("-o", "--output", default=None, help="Output file (suffix follows media type if omitted)")
    render_cmd.add_argument("--tone-mode", choices=list(TONE_MODES), default=None)
    render_cmd.add_argument("--threshold", type=int, default=None, help="0-255, also biases sampled mode")
    render_cmd.add_argument("--density", type=_positive_int, default=None, help="Halftone block side in pixels")
    render_cmd.add_argument("--fit", choices=list(FIT_MODES), default=None)
    render_cmd.add_argument("--max-bytes", type=_positive_int, default=None, help="Upload byte budget")
    render_cmd.add_argument("--format", choices=list(TARGET_FORMATS), default=None)
    render_cmd.set_defaults(func=cmd_render)

    pattern_cmd = sub.add_parser("pattern", help="Print the halftone fill order for one block")
    pattern_cmd.add_argument("--width", type=_positive_int, default=6)
    pattern_cmd.add_argument("--height", type=_positive_int, default=6)
    pattern_cmd.set_defaults(func=cmd_pattern)

    config_cmd = sub.add_parser("config", help="Print effective settings")
    config_cmd.add_argument("--write", action="store_true", help="Persist the effective settings")
    config_cmd.set_defaults(func=cmd_config)

    samples_cmd = sub.add_parser("samples", help="List calibration images")
    samples_cmd.set_defaults(func=cmd_samples)

    return parser


def main(argv: list[str] | None = None) -> int:
    cfg = load_config()
    configure_logging(keep_files=cfg.diagnostics.keep_log_files, console=False)
    install_crash_hook()
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
