import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from typing import Iterable, List, Tuple

from .. import config
from ..exceptions import ConversionError, MissingDependencyError
from ..models import ConversionJob, JobKind


def check_dependencies(tools: Iterable[str] = config.REQUIRED_TOOLS):
    """
    Verifies every tool is on PATH. Collects all missing tools before failing
    so the user can install them in one go.
    """
    tools = list(tools)
    missing = [tool for tool in tools if shutil.which(tool) is None]
    if missing:
        raise MissingDependencyError(missing)
    logging.debug(f"Found required tools: {', '.join(tools)}")


class Encoder(ABC):
    required_tools: Tuple[str, ...] = ()

    @abstractmethod
    def encode(self, job: ConversionJob) -> str:
        """
        Writes job.output from job.source and returns the encoder's stderr.
        Raises ConversionError on failure.
        """
        ...


class SubprocessEncoder(Encoder):
    """Runs cwebp for images and ffmpeg (libx265) for videos."""

    required_tools = config.REQUIRED_TOOLS

    def __init__(self, webp_quality: int = config.DEFAULT_WEBP_QUALITY):
        self.webp_quality = webp_quality

    def build_command(self, job: ConversionJob) -> List[str]:
        if job.kind is JobKind.IMAGE_TO_WEBP:
            return [config.CWEBP_BIN, "-q", str(self.webp_quality),
                    str(job.source), "-o", str(job.output)]
        # -n: never overwrite an existing output
        return [config.FFMPEG_BIN, "-n", "-hide_banner", "-i", str(job.source),
                *config.FFMPEG_HEVC_ARGS, str(job.output)]

    def encode(self, job: ConversionJob) -> str:
        cmd = self.build_command(job)
        logging.debug(f"Running: {' '.join(cmd)}")
        try:
            proc = subprocess.run(cmd, check=False, capture_output=True, text=True)
        except OSError as e:
            raise ConversionError(job.source, f"{cmd[0]} exec error: {e}") from e

        stderr = (proc.stderr or "").strip()
        if proc.returncode != 0:
            raise ConversionError(job.source, stderr or f"{cmd[0]} exited {proc.returncode}")
        return stderr
