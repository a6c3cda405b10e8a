import shutil
import sqlite3
import pytest
from pathlib import Path

from media_optimizer.core import MediaOptimizerApp
from media_optimizer.database.ops import DBOperations
from media_optimizer.exceptions import MissingDependencyError, NotFoundError
from media_optimizer.models import JobKind, OutputPlacement, RunConfig
from conftest import FakeEncoder, FakeProbeClient


def _catalog(db_path):
    conn = sqlite3.connect(db_path)
    try:
        return DBOperations(conn).fetch_catalog()
    finally:
        conn.close()

def _app(src, out, probe, encoder=None, **kwargs):
    cfg = RunConfig(source_dir=src, output_dir=out, **kwargs)
    return MediaOptimizerApp(cfg, probe=probe, encoder=encoder or FakeEncoder(), show_progress=False)


def test_full_run(media_tree, fake_probe):
    out = media_tree.parent / "converted"
    summary = _app(media_tree, out, fake_probe).run()

    assert len(summary.records) == 4
    assert [(j.source.name, j.kind) for j in summary.jobs] == [
        ("x.png", JobKind.IMAGE_TO_WEBP),
        ("w.jpg", JobKind.IMAGE_TO_WEBP),
        ("y.mp4", JobKind.VIDEO_TO_HEVC),
    ]
    assert (out / "x.png.webp").exists()
    assert (out / "b" / "w.jpg.webp").exists()
    assert summary.catalog_path == out / "files.db"

    catalog = {name: (value, converted) for name, value, converted in _catalog(summary.catalog_path)}
    assert catalog == {
        str(media_tree / "x.png"): ("image/png", False),
        str(media_tree / "y.mp4"): ("h264", False),
        str(media_tree / "z.txt"): (None, False),
        str(media_tree / "b" / "w.jpg"): ("image/jpeg", False),
    }

def test_rerun_produces_identical_catalog(media_tree, fake_probe):
    out = media_tree.parent / "converted"
    app = _app(media_tree, out, fake_probe)

    first = app.run()
    tuples_first = _catalog(first.catalog_path)
    second = app.run()
    tuples_second = _catalog(second.catalog_path)

    assert tuples_first == tuples_second
    # Outputs from the first run are left alone
    assert all(r.status == "skipped" for r in second.results)

def test_probe_failure_still_planned(media_tree):
    probe = FakeProbeClient()  # nothing scripted: every probe fails
    summary = _app(media_tree, media_tree.parent / "out", probe).run()

    assert {j.source.name for j in summary.jobs} == {"x.png", "w.jpg", "y.mp4"}

def test_already_converted_files_not_planned(media_tree):
    probe = FakeProbeClient(
        mimes={"x.png": "image/webp", "w.jpg": "image/jpeg", "y.mp4": "video/mp4"},
        codecs={"y.mp4": "hevc"},
    )
    summary = _app(media_tree, media_tree.parent / "out", probe).run()

    assert [j.source.name for j in summary.jobs] == ["w.jpg"]

def test_failed_conversion_recorded_and_run_continues(media_tree, fake_probe):
    out = media_tree.parent / "out"
    summary = _app(media_tree, out, fake_probe, encoder=FakeEncoder(fail={"x.png"})).run()

    assert summary.failed == 1
    assert (out / "y.mp4.hevc.mp4").exists()

    conn = sqlite3.connect(summary.catalog_path)
    try:
        failed = DBOperations(conn).fetch_failed_conversions()
    finally:
        conn.close()
    assert failed == [(str(media_tree / "x.png"), "image_to_webp", "encoder exploded")]

def test_output_dir_inside_source_is_not_scanned(media_tree, fake_probe):
    out = media_tree / "converted"
    app = _app(media_tree, out, fake_probe)
    app.run()
    summary = app.run()

    assert len(summary.records) == 4

def test_dry_run_writes_catalog_but_no_outputs(media_tree, fake_probe):
    out = media_tree.parent / "out"
    encoder = FakeEncoder()
    summary = _app(media_tree, out, fake_probe, encoder=encoder, dry_run=True).run()

    assert encoder.encoded == []
    assert all(r.status == "dry_run" for r in summary.results)
    assert not (out / "x.png.webp").exists()
    assert (out / "files.db").exists()

def test_in_place_run_replaces_sources(media_tree, fake_probe):
    summary = _app(media_tree, media_tree.parent / "out", fake_probe,
                   placement=OutputPlacement.IN_PLACE, replace_in_place=True).run()

    assert summary.failed == 0
    assert (media_tree / "x.webp").exists()
    assert not (media_tree / "x.png").exists()
    assert (media_tree / "z.txt").exists()

def test_custom_db_path(media_tree, fake_probe, tmp_path):
    db_path = tmp_path / "elsewhere" / "catalog.db"
    summary = _app(media_tree, media_tree.parent / "out", fake_probe, db_path=db_path).run()

    assert summary.catalog_path == db_path
    assert len(_catalog(db_path)) == 4

def test_report_csv(media_tree, fake_probe, tmp_path):
    report = tmp_path / "report.csv"
    _app(media_tree, media_tree.parent / "out", fake_probe).run(report_csv=report)

    assert len(report.read_text(encoding="utf-8").splitlines()) == 5

def test_missing_dependencies_abort_before_scanning(media_tree, monkeypatch):
    from media_optimizer.conversion.encoder import SubprocessEncoder

    monkeypatch.setattr(shutil, "which", lambda name: None)
    probe = FakeProbeClient()
    out = media_tree.parent / "out"
    app = _app(media_tree, out, probe, encoder=SubprocessEncoder())

    with pytest.raises(MissingDependencyError) as exc:
        app.run()

    assert exc.value.missing == ["ffmpeg", "cwebp"]
    assert probe.calls == []
    assert not (out / "files.db").exists()

def test_missing_source_is_fatal(tmp_path, fake_probe):
    with pytest.raises(NotFoundError):
        _app(tmp_path / "missing", tmp_path / "out", fake_probe).run()

def test_show_progress_reaches_executor(media_tree, fake_probe, monkeypatch):
    seen = []

    def fake_tqdm(iterable, **kwargs):
        seen.append(kwargs["disable"])
        return iterable

    monkeypatch.setattr("media_optimizer.conversion.executor.tqdm", fake_tqdm)

    _app(media_tree, media_tree.parent / "converted", fake_probe).run()
    assert seen == [True]
