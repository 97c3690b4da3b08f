"""Run a single generation from the command line.

Examples (from the project root):
    export OPENAI_API_KEY=...
    python -m scripts.generate_image --prompt "rose gold ring with a round diamond"
    python -m scripts.generate_image --modality sketch --sketch sketch.png --output ring.png
    python -m scripts.generate_image --provider fal --prompt "emerald pendant"

Prints the image URL, or writes inline bytes to ``--output``. Exit code 1
reports an orchestration error as ``<kind>: <message>``.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from src.jewelgen.config import GenerationConfig
from src.jewelgen.generation.generation_errors import OrchestrationError
from src.jewelgen.generation.generation_models import (
    GenerationRequest,
    GenerationResult,
    Modality,
    SketchMode,
)
from src.jewelgen.generation.orchestrator import create_orchestrator
from src.jewelgen.logging import configure_logging


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate one jewelry render.")
    parser.add_argument("--prompt", default="", help="User prompt text.")
    parser.add_argument("--provider", default=None, help="Provider key (default from config).")
    parser.add_argument(
        "--modality",
        choices=[modality.value for modality in Modality],
        default=Modality.TEXT.value,
    )
    parser.add_argument("--sketch", type=Path, default=None, help="Sketch PNG file.")
    parser.add_argument("--camera", type=Path, default=None, help="Camera photo file.")
    parser.add_argument(
        "--sketch-mode",
        choices=[mode.value for mode in SketchMode],
        default=None,
        help="Override the configured sketch strategy.",
    )
    parser.add_argument("--output", type=Path, default=None, help="Where to write inline bytes.")
    return parser.parse_args(argv)


def build_request(args: argparse.Namespace) -> GenerationRequest:
    return GenerationRequest(
        raw_prompt=args.prompt,
        modality=Modality(args.modality),
        provider_key=args.provider,
        sketch_raster=args.sketch.read_bytes() if args.sketch else None,
        camera_raster=args.camera.read_bytes() if args.camera else None,
    )


def emit_result(result: GenerationResult, output: Path | None) -> str:
    """Persist or describe ``result`` and return the line to print."""
    if result.image_bytes is not None:
        target = output or Path(f"generated-{result.provider_key}.png")
        target.write_bytes(result.image_bytes)
        return f"{result.provider_key}: wrote {len(result.image_bytes)} bytes to {target}"
    return f"{result.provider_key}: {result.image_url}"


async def run(args: argparse.Namespace, config: GenerationConfig | None = None) -> GenerationResult:
    cfg = config or GenerationConfig.build_default()
    if args.sketch_mode:
        cfg = cfg.model_copy(update={"sketch_mode": SketchMode(args.sketch_mode)})
    orchestrator = create_orchestrator(cfg)
    return await orchestrator.orchestrate(build_request(args))


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging()
    try:
        result = asyncio.run(run(args))
        line = emit_result(result, args.output)
    except OrchestrationError as exc:
        print(f"{exc.kind.value}: {exc.message}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"io error: {exc}", file=sys.stderr)
        return 2

    print(line)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual execution
    sys.exit(main())
