import pytest
import sqlite3
from pathlib import Path

from media_optimizer.conversion.encoder import Encoder
from media_optimizer.database.schema import init_schema
from media_optimizer.database.ops import DBOperations
from media_optimizer.exceptions import ConversionError, ProbeError
from media_optimizer.probing.probe import ProbeClient


class FakeProbeClient(ProbeClient):
    """Scripted probe keyed by file name. Missing names fail like a broken probe."""

    def __init__(self, mimes=None, codecs=None):
        self.mimes = mimes or {}
        self.codecs = codecs or {}
        self.calls = []

    def probe_mime(self, path):
        self.calls.append(("mime", Path(path).name))
        if Path(path).name not in self.mimes:
            raise ProbeError(path, "no scripted mime")
        return self.mimes[Path(path).name]

    def probe_video_codec(self, path):
        self.calls.append(("codec", Path(path).name))
        if Path(path).name not in self.codecs:
            raise ProbeError(path, "no scripted codec")
        return self.codecs[Path(path).name]


class FakeEncoder(Encoder):
    """Writes a placeholder output, or fails for the given source names."""

    required_tools = ()

    def __init__(self, fail=()):
        self.fail = set(fail)
        self.encoded = []

    def encode(self, job):
        self.encoded.append(job.source.name)
        if job.source.name in self.fail:
            raise ConversionError(job.source, "encoder exploded")
        job.output.write_bytes(b"converted")
        return ""


@pytest.fixture
def conn():
    """Returns an in-memory SQLite connection with the schema initialized."""
    c = sqlite3.connect(":memory:")
    init_schema(c)
    try:
        yield c
    finally:
        c.close()

@pytest.fixture
def db_ops(conn):
    """Returns a DBOperations instance attached to the in-memory DB."""
    return DBOperations(conn)

@pytest.fixture
def media_tree(tmp_path):
    """
    a/x.png, a/y.mp4, a/z.txt, a/b/w.jpg
    """
    root = (tmp_path / "a").resolve()
    (root / "b").mkdir(parents=True)
    (root / "x.png").write_bytes(b"png")
    (root / "y.mp4").write_bytes(b"mp4")
    (root / "z.txt").write_text("text")
    (root / "b" / "w.jpg").write_bytes(b"jpg")
    return root

@pytest.fixture
def fake_probe():
    return FakeProbeClient(
        mimes={"x.png": "image/png", "w.jpg": "image/jpeg", "y.mp4": "video/mp4"},
        codecs={"y.mp4": "h264"},
    )
