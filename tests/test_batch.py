"""Tests for the batch driver."""

import json
import zipfile

import pytest

from tests.conftest import build_document

from swfpatcher.batch import BatchConfig, load_batch_config, plan_batch, run_batch
from swfpatcher.codec import JsonDocumentCodec
from swfpatcher.exceptions import ConfigError, PatchIOError


@pytest.fixture
def workspace(tmp_path):
    """A batch directory with two patch configs and two document files."""
    batch_dir = tmp_path / "mods"
    batch_dir.mkdir()
    (batch_dir / "transparent.json").write_text(json.dumps({"transparent": [3]}), encoding="utf-8")
    (batch_dir / "remove.json").write_text(json.dumps({"remove_elements": {"shapes": [7]}}), encoding="utf-8")
    target = tmp_path / "movie.swf"
    target.write_bytes(JsonDocumentCodec().encode(build_document(version=6)))
    (tmp_path / "other.swf").write_bytes(target.read_bytes())
    return tmp_path


def _batch(data):
    return BatchConfig.model_validate(data)


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------


def test_plan_archive_and_plain_mods(tmp_path):
    batch = _batch(
        {
            "mods": [
                {"name": "hud", "ba2": True, "files": [{"path": "Interface\\HUDMenu.swf", "config": "hud.json"}]},
                {"name": "loading", "config": "configs/loading.json"},
            ]
        }
    )
    jobs = plan_batch(
        batch,
        tmp_path,
        tmp_path / "out",
        archive_path="Data/Interface.ba2",
        targets={"loading": "x/Loading.swf"},
    )

    hud, loading = jobs
    assert hud.source == "Data/Interface.ba2//Interface/HUDMenu.swf"
    assert hud.config_path == tmp_path / "hud.json"
    assert hud.output_path == tmp_path / "out" / "Interface" / "HUDMenu.swf"
    assert loading.source.endswith("Loading.swf")
    assert loading.config_path == tmp_path / "configs" / "loading.json"
    assert loading.output_path == tmp_path / "out" / "Loading.swf"


def test_plan_archive_mod_without_archive(tmp_path):
    batch = _batch({"mods": [{"name": "hud", "ba2": True, "files": [{"path": "a.swf", "config": "a.json"}]}]})
    with pytest.raises(ConfigError, match="no archive"):
        plan_batch(batch, tmp_path, tmp_path)


def test_plan_plain_mod_without_target(tmp_path):
    batch = _batch({"mods": [{"name": "loading", "config": "loading.json"}]})
    with pytest.raises(ConfigError, match="No target"):
        plan_batch(batch, tmp_path, tmp_path)


def test_plan_plain_mod_without_config(tmp_path):
    batch = _batch({"mods": [{"name": "loading"}]})
    with pytest.raises(ConfigError, match="no config"):
        plan_batch(batch, tmp_path, tmp_path, targets={"loading": "a.swf"})


def test_plan_rejects_two_mods_writing_one_target(tmp_path):
    batch = _batch({"mods": [{"name": "fade", "config": "a.json"}, {"name": "trim", "config": "b.json"}]})
    targets = {"fade": "x/movie.swf", "trim": "y/movie.swf"}
    with pytest.raises(ConfigError, match="'fade' and 'trim' both write"):
        plan_batch(batch, tmp_path, tmp_path / "out", targets=targets)


def test_plan_rejects_repeated_archive_entry(tmp_path):
    entries = [
        {"path": "Interface\\HUDMenu.swf", "config": "a.json"},
        {"path": "Interface/HUDMenu.swf", "config": "b.json"},
    ]
    batch = _batch({"mods": [{"name": "hud", "ba2": True, "files": entries}]})
    with pytest.raises(ConfigError, match="both write"):
        plan_batch(batch, tmp_path, tmp_path / "out", archive_path="Interface.zip")


def test_load_batch_config(tmp_path):
    path = tmp_path / "batch.json"
    path.write_text(json.dumps({"mods": [{"name": "a", "config": "a.json"}]}), encoding="utf-8")
    assert load_batch_config(path).mods[0].name == "a"

    path.write_text('{"mods": [{"config": "a.json"}]}', encoding="utf-8")
    with pytest.raises(ConfigError):
        load_batch_config(path)

    with pytest.raises(PatchIOError):
        load_batch_config(tmp_path / "missing.json")


# ---------------------------------------------------------------------------
# Running
# ---------------------------------------------------------------------------


def test_run_plain_targets(workspace):
    codec = JsonDocumentCodec()
    batch = _batch({"mods": [{"name": "fade", "config": "transparent.json"}, {"name": "trim", "config": "remove.json"}]})
    out = workspace / "out"
    jobs = plan_batch(
        batch,
        workspace / "mods",
        out,
        targets={"fade": workspace / "movie.swf", "trim": workspace / "other.swf"},
    )

    results = run_batch(jobs, codec, max_workers=2)

    assert [r.success for r in results] == [True, True]
    assert [r.job.mod_name for r in results] == ["fade", "trim"]
    faded = codec.decode((out / "movie.swf").read_bytes())
    assert faded.header.swf_version == 8
    trimmed = codec.decode((out / "other.swf").read_bytes())
    assert trimmed.find_definition(7) is None
    # the source file is never modified
    assert codec.decode((workspace / "movie.swf").read_bytes()).header.swf_version == 6


def test_run_archive_entries(workspace):
    codec = JsonDocumentCodec()
    archive = workspace / "Interface.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("Interface/HUDMenu.swf", (workspace / "movie.swf").read_bytes())
    batch = _batch(
        {"mods": [{"name": "hud", "ba2": True, "files": [{"path": "Interface/HUDMenu.swf", "config": "transparent.json"}]}]}
    )
    jobs = plan_batch(batch, workspace / "mods", workspace / "out", archive_path=archive)

    (result,) = run_batch(jobs, codec, max_workers=1, compression="Deflate")

    assert result.success
    patched = codec.decode((workspace / "out" / "Interface" / "HUDMenu.swf").read_bytes())
    assert patched.header.swf_version == 8
    assert patched.header.compression == "Deflate"


def test_first_failure_raises(workspace):
    batch = _batch({"mods": [{"name": "broken", "config": "missing.json"}]})
    jobs = plan_batch(batch, workspace / "mods", workspace / "out", targets={"broken": workspace / "movie.swf"})
    with pytest.raises(PatchIOError):
        run_batch(jobs, JsonDocumentCodec(), max_workers=1)


def test_continue_on_error_reports_failures(workspace):
    batch = _batch(
        {"mods": [{"name": "broken", "config": "missing.json"}, {"name": "fade", "config": "transparent.json"}]}
    )
    targets = {"broken": workspace / "movie.swf", "fade": workspace / "other.swf"}
    jobs = plan_batch(batch, workspace / "mods", workspace / "out", targets=targets)

    results = run_batch(jobs, JsonDocumentCodec(), max_workers=2, continue_on_error=True)

    assert [r.success for r in results] == [False, True]
    assert "missing.json" in results[0].error
