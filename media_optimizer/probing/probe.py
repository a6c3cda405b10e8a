import logging
import re
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from PIL import Image, UnidentifiedImageError
from pymediainfo import MediaInfo

from .. import config
from ..exceptions import ProbeError

# A single token such as "image/webp" or "video/x-matroska"
_MIME_RE = re.compile(r'^[\w.+-]+/[\w.+-]+$')
# A single token such as "hevc" or "h264"
_CODEC_RE = re.compile(r'^[\w.+-]+$')


class ProbeClient(ABC):
    """
    Read-only inspection of a file's real format, independent of its extension.

    Both methods raise ProbeError on any failure. Callers treat that as
    recoverable: the file is kept and marked as needing conversion.
    """

    @abstractmethod
    def probe_mime(self, path: Path) -> str:
        ...

    @abstractmethod
    def probe_video_codec(self, path: Path) -> str:
        ...


class SubprocessProbeClient(ProbeClient):
    """
    Wraps the 'file' and 'ffprobe' command line utilities.
    Both must be installed and on the system PATH.
    """

    def __init__(self,
                 mime_cmd: List[str] = config.MIME_PROBE_CMD,
                 codec_cmd: List[str] = config.CODEC_PROBE_CMD):
        self.mime_cmd = list(mime_cmd)
        self.codec_cmd = list(codec_cmd)

    def probe_mime(self, path: Path) -> str:
        # 'file' exits 0 even for unreadable paths, so the output shape is the real check
        out = self._run(self.mime_cmd, path)
        if not _MIME_RE.match(out):
            raise ProbeError(path, f"unparseable mime type output: {out!r}")
        return out

    def probe_video_codec(self, path: Path) -> str:
        out = self._run(self.codec_cmd, path)
        if not _CODEC_RE.match(out):
            raise ProbeError(path, f"unparseable codec output: {out!r}")
        return out

    def _run(self, cmd: List[str], path: Path) -> str:
        full_cmd = [*cmd, str(path)]
        logging.debug(f"Running: {' '.join(full_cmd)}")
        try:
            proc = subprocess.run(full_cmd, check=False, capture_output=True, text=True)
        except FileNotFoundError:
            raise ProbeError(path, f"{cmd[0]} not found")
        except OSError as e:
            raise ProbeError(path, f"{cmd[0]} exec error: {e}") from e

        if proc.returncode != 0:
            stderr = (proc.stderr or "").strip()
            raise ProbeError(path, stderr or f"{cmd[0]} exited {proc.returncode}")

        return (proc.stdout or "").strip()


class LibraryProbeClient(ProbeClient):
    """
    In-process probing without spawning external processes.

    Strategies:
      - Mime type: Pillow first (covers raster images), then the MediaInfo
        general track for everything else.
      - Video codec: the first MediaInfo video track.
    """

    def probe_mime(self, path: Path) -> str:
        try:
            with Image.open(path) as im:
                mime = Image.MIME.get(im.format or "")
            if mime:
                return mime
        except (UnidentifiedImageError, OSError) as e:
            logging.debug(f"Pillow could not identify {path}: {e}")

        general = self._first_track(path, "General")
        mime = getattr(general, "internet_media_type", None) if general else None
        if not mime:
            raise ProbeError(path, "no mime type reported")
        return str(mime).strip()

    def probe_video_codec(self, path: Path) -> str:
        video = self._first_track(path, "Video")
        fmt = getattr(video, "format", None) if video else None
        if not fmt:
            raise ProbeError(path, "no video stream found")
        return config.MEDIAINFO_CODEC_MAP.get(fmt, str(fmt).lower())

    def _first_track(self, path: Path, track_type: str):
        try:
            mi = MediaInfo.parse(str(path))
        except Exception as e:
            raise ProbeError(path, f"MediaInfo failed: {e}") from e

        for track in mi.tracks:
            if track.track_type == track_type:
                return track
        return None
