import importlib.util
import sys
from pathlib import Path

import pytest

from src.jewelgen.config import GenerationConfig
from src.jewelgen.generation.generation_errors import UnknownProvider
from src.jewelgen.generation.generation_models import GenerationResult, Modality
from tests.mocks.vendors import TRANSPARENT_PNG_BASE64, TRANSPARENT_PNG_BYTES, DummyHTTPResponse

PROJECT_ROOT = Path(__file__).resolve().parents[3]
MODULE_PATH = PROJECT_ROOT / "scripts" / "generate_image.py"
SPEC = importlib.util.spec_from_file_location("generate_image_module", MODULE_PATH)
generate_image = importlib.util.module_from_spec(SPEC)
assert SPEC and SPEC.loader
sys.modules["generate_image_module"] = generate_image
SPEC.loader.exec_module(generate_image)


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(generate_image, "configure_logging", lambda: None)


def test_build_request_reads_sketch_file(tmp_path):
    sketch = tmp_path / "sketch.png"
    sketch.write_bytes(TRANSPARENT_PNG_BYTES)
    args = generate_image.parse_args(
        ["--prompt", "ring", "--modality", "sketch", "--sketch", str(sketch)]
    )

    request = generate_image.build_request(args)

    assert request.modality is Modality.SKETCH
    assert request.sketch_raster == TRANSPARENT_PNG_BYTES
    assert request.camera_raster is None
    assert request.provider_key is None


def test_emit_result_writes_inline_bytes(tmp_path):
    target = tmp_path / "out.png"
    result = GenerationResult(provider_key="openai_image_edit", image_bytes=b"png-bytes")

    line = generate_image.emit_result(result, target)

    assert target.read_bytes() == b"png-bytes"
    assert line == f"openai_image_edit: wrote 9 bytes to {target}"


def test_emit_result_describes_url():
    result = GenerationResult(provider_key="fal", image_url="https://fal.media/x.png")

    assert generate_image.emit_result(result, None) == "fal: https://fal.media/x.png"


def test_main_prints_result(monkeypatch, capsys):
    async def fake_run(args):
        return GenerationResult(provider_key="openai", image_url="https://x/y.png")

    monkeypatch.setattr(generate_image, "run", fake_run)

    assert generate_image.main(["--prompt", "ring"]) == 0
    assert capsys.readouterr().out.strip() == "openai: https://x/y.png"


def test_main_reports_orchestration_error(monkeypatch, capsys):
    async def fake_run(args):
        raise UnknownProvider("Unknown generator: midjourney")

    monkeypatch.setattr(generate_image, "run", fake_run)

    assert generate_image.main(["--provider", "midjourney"]) == 1
    assert capsys.readouterr().err.strip() == "unknown_provider: Unknown generator: midjourney"


def test_main_reports_missing_input_file(capsys, tmp_path):
    missing = tmp_path / "missing.png"

    assert generate_image.main(["--modality", "sketch", "--sketch", str(missing)]) == 2
    assert "io error" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_run_applies_sketch_mode_override(vendor, tmp_path):
    sketch = tmp_path / "sketch.png"
    sketch.write_bytes(TRANSPARENT_PNG_BYTES)
    vendor.queue(DummyHTTPResponse(200, {"data": [{"b64_json": TRANSPARENT_PNG_BASE64}]}))
    args = generate_image.parse_args(
        ["--modality", "sketch", "--sketch", str(sketch), "--sketch-mode", "direct_edit"]
    )
    config = GenerationConfig(provider_keys={"OPENAI_API_KEY": "sk-test"})

    result = await generate_image.run(args, config)

    assert result.image_bytes == TRANSPARENT_PNG_BYTES
    assert vendor.requests[0]["url"] == "https://api.openai.com/v1/images/edits"
