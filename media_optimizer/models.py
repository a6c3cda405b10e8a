from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import FrozenSet, List, Optional

from . import config


class Category(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    OTHER = "other"


class OutputPlacement(str, Enum):
    IN_PLACE = "in_place"    # converted file replaces the source
    SIBLING = "sibling"      # converted file written next to the source
    MIRRORED = "mirrored"    # converted file written under output_dir


class JobKind(str, Enum):
    IMAGE_TO_WEBP = "image_to_webp"
    VIDEO_TO_HEVC = "video_to_hevc"


@dataclass
class FileRecord:
    """
    Represents a file found during a scan.
    Traversal fills in the path; the Classifier fills in everything else.
    """
    path: Path
    category: Category = Category.OTHER
    mime_type: Optional[str] = None
    codec: Optional[str] = None
    converted: bool = False
    probe_error: Optional[str] = None

    @property
    def codec_or_mime(self) -> Optional[str]:
        return self.codec or self.mime_type


@dataclass(frozen=True)
class RunConfig:
    source_dir: Path
    output_dir: Path
    replace_in_place: bool = False
    placement: OutputPlacement = OutputPlacement.MIRRORED
    webp_quality: int = config.DEFAULT_WEBP_QUALITY
    image_exts: FrozenSet[str] = frozenset(config.IMAGE_EXTS)
    video_exts: FrozenSet[str] = frozenset(config.VIDEO_EXTS)
    dry_run: bool = False
    db_path: Optional[Path] = None

    @property
    def catalog_path(self) -> Path:
        return self.db_path if self.db_path else self.output_dir / config.CATALOG_NAME


@dataclass
class ClassifiedFiles:
    images: List[FileRecord] = field(default_factory=list)
    videos: List[FileRecord] = field(default_factory=list)
    others: List[FileRecord] = field(default_factory=list)

    def needs_conversion(self) -> List[FileRecord]:
        return [r for r in self.images + self.videos if not r.converted]


@dataclass
class ConversionJob:
    kind: JobKind
    record: FileRecord
    output: Path
    replace_source: bool = False

    @property
    def source(self) -> Path:
        return self.record.path


# ConversionResult.status values
STATUS_CONVERTED = "converted"
STATUS_FAILED = "failed"
STATUS_SKIPPED = "skipped"
STATUS_DRY_RUN = "dry_run"


@dataclass
class ConversionResult:
    job: ConversionJob
    success: bool
    output_path: Optional[Path] = None
    stderr: str = ""
    status: str = STATUS_CONVERTED
