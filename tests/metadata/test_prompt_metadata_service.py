import asyncio
import json
import time

import pytest

from promptdb_backend.features.metadata.service import PromptMetadataService, build_record, read_image_size
from promptdb_backend.shared import ErrorCode
from tests.image_fixtures import A1111_PARAMETERS, pillow_image, pillow_png


@pytest.mark.asyncio
async def test_get_metadata_returns_record_for_png(tmp_path):
    path = tmp_path / "a1111.png"
    path.write_bytes(pillow_png({"parameters": A1111_PARAMETERS}))

    res = await PromptMetadataService().get_metadata(str(path))
    assert res.ok, res.error
    record = res.data
    assert record["positive_prompt"] == "best quality, 1girl"
    assert record["negative_prompt"] == "worst quality"
    assert record["model"] == "foo"
    assert record["filename"] == "a1111.png"
    assert record["file_size"] == path.stat().st_size
    assert "Steps: 20" in record["metadata_text"]


@pytest.mark.asyncio
async def test_get_metadata_jpeg_without_metadata_is_ok(tmp_path):
    path = tmp_path / "plain.jpg"
    path.write_bytes(pillow_image("JPEG"))

    res = await PromptMetadataService().get_metadata(str(path))
    assert res.ok
    assert res.data["positive_prompt"] == ""
    assert res.data["model"] == "?"
    assert res.data["size"] == "?"
    assert res.data["metadata_text"] == ""


@pytest.mark.asyncio
async def test_missing_file_is_not_found(tmp_path):
    res = await PromptMetadataService().get_metadata(str(tmp_path / "missing.png"))
    assert not res.ok
    assert res.code == ErrorCode.NOT_FOUND.value
    assert "missing.png" in res.error
    assert str(tmp_path) not in res.error


@pytest.mark.asyncio
async def test_non_image_is_unsupported(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("Steps: 20", encoding="utf-8")

    res = await PromptMetadataService().get_metadata(str(path))
    assert not res.ok
    assert res.code == ErrorCode.UNSUPPORTED.value


@pytest.mark.asyncio
async def test_oversized_file_is_rejected(tmp_path):
    path = tmp_path / "big.png"
    path.write_bytes(pillow_png({"parameters": A1111_PARAMETERS}))

    res = await PromptMetadataService(max_file_bytes=16).get_metadata(str(path))
    assert not res.ok
    assert res.code == ErrorCode.INVALID_INPUT.value
    assert res.meta["file_size"] == path.stat().st_size


@pytest.mark.asyncio
async def test_size_filled_from_image_header_when_enabled(tmp_path):
    path = tmp_path / "comfy.png"
    path.write_bytes(pillow_png({"parameters": "a fox\nSteps: 4"}, size=(64, 48)))

    plain = await PromptMetadataService().get_metadata(str(path))
    filled = await PromptMetadataService(size_from_image=True).get_metadata(str(path))
    assert plain.data["size"] == "?"
    assert filled.data["size"] == "64x48"


@pytest.mark.asyncio
async def test_embedded_size_is_not_overridden(tmp_path):
    path = tmp_path / "sized.png"
    path.write_bytes(pillow_png({"parameters": A1111_PARAMETERS}, size=(10, 10)))

    res = await PromptMetadataService(size_from_image=True).get_metadata(str(path))
    assert res.data["size"] == "512x768"


@pytest.mark.asyncio
async def test_batch_keeps_per_file_results(tmp_path):
    good = tmp_path / "good.png"
    good.write_bytes(pillow_png({"parameters": A1111_PARAMETERS}))
    missing = tmp_path / "gone.webp"

    results = await PromptMetadataService(max_concurrency=1).get_metadata_batch([str(good), str(missing)])
    assert list(results) == [str(good), str(missing)]
    assert results[str(good)].ok
    assert results[str(missing)].code == ErrorCode.NOT_FOUND.value


@pytest.mark.asyncio
async def test_concurrency_is_bounded(tmp_path, monkeypatch):
    import promptdb_backend.features.metadata.service as service_mod

    in_flight = 0
    peak = 0
    real_build = service_mod.build_record

    def slow_build(data):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        try:
            time.sleep(0.02)
            return real_build(data)
        finally:
            in_flight -= 1

    monkeypatch.setattr(service_mod, "build_record", slow_build)

    paths = []
    for i in range(6):
        p = tmp_path / f"img{i}.png"
        p.write_bytes(pillow_png({"parameters": f"prompt {i}\nSteps: {i + 1}"}))
        paths.append(str(p))

    results = await PromptMetadataService(max_concurrency=2).get_metadata_batch(paths)
    assert all(r.ok for r in results.values())
    assert results[paths[3]].data["steps"] == "4"
    assert peak <= 2


def test_read_image_size(tmp_path):
    path = tmp_path / "x.webp"
    path.write_bytes(pillow_image("WEBP", size=(20, 12)))
    assert read_image_size(str(path)) == "20x12"

    broken = tmp_path / "broken.png"
    broken.write_bytes(b"\x89PNG not really")
    assert read_image_size(str(broken)) is None


def test_build_record_from_bytes():
    record = build_record(pillow_png({"parameters": A1111_PARAMETERS}))
    assert record["seed"] == "12345"
    assert record["metadata_text"].startswith("parameters")


def test_service_is_usable_from_plain_asyncio_run(tmp_path):
    path = tmp_path / "run.png"
    path.write_bytes(pillow_png({"parameters": A1111_PARAMETERS}))
    res = asyncio.run(PromptMetadataService().get_metadata(str(path)))
    assert res.unwrap()["steps"] == "20"


@pytest.mark.asyncio
async def test_engine_failure_is_isolated_to_its_file(tmp_path, monkeypatch):
    import promptdb_backend.features.metadata.service as service_mod

    real_build = service_mod.build_record

    def flaky_build(data):
        if b"explode" in data:
            raise TypeError("unhashable type: 'list'")
        return real_build(data)

    monkeypatch.setattr(service_mod, "build_record", flaky_build)

    good = tmp_path / "good.png"
    good.write_bytes(pillow_png({"parameters": A1111_PARAMETERS}))
    bad = tmp_path / "bad.png"
    bad.write_bytes(pillow_png({"workflow": "explode"}))

    results = await PromptMetadataService().get_metadata_batch([str(good), str(bad)])
    assert results[str(good)].ok
    assert results[str(good)].data["model"] == "foo"
    assert not results[str(bad)].ok
    assert results[str(bad)].code == ErrorCode.METADATA_FAILED.value
    assert results[str(bad)].error.startswith("Failed to extract metadata")


@pytest.mark.asyncio
async def test_malformed_workflow_chunk_does_not_fail_the_file(tmp_path):
    workflow = {
        "nodes": [
            {
                "id": 3,
                "class_type": "KSampler",
                "inputs": [{"name": "seed", "widget": {"name": "seed"}, "link": [1, 2]}],
                "widgets_values": [5, ["x"]],
            }
        ],
        "links": [[[1], 2, 0]],
    }
    path = tmp_path / "odd.png"
    path.write_bytes(pillow_png({"workflow": json.dumps(workflow)}))

    res = await PromptMetadataService().get_metadata(str(path))
    assert res.ok
    assert res.data["model"] == "?"
