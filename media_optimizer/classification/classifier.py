import logging
from pathlib import Path
from typing import Iterable, List, Optional

from tqdm import tqdm

from .. import config
from ..exceptions import ProbeError
from ..models import Category, ClassifiedFiles, FileRecord
from ..probing.probe import ProbeClient


def normalize_exts(exts: Iterable[str]) -> frozenset:
    """'PNG', '.png' and 'png' all become '.png'."""
    return frozenset('.' + e.strip().lower().lstrip('.') for e in exts if e.strip())


class Classifier:
    def __init__(self,
                 probe: ProbeClient,
                 image_exts: Optional[Iterable[str]] = None,
                 video_exts: Optional[Iterable[str]] = None,
                 show_progress: bool = True):
        self.probe = probe
        self.image_exts = normalize_exts(image_exts if image_exts is not None else config.IMAGE_EXTS)
        self.video_exts = normalize_exts(video_exts if video_exts is not None else config.VIDEO_EXTS)
        self.show_progress = show_progress

    def categorize(self, path: Path) -> Category:
        """Pure function of the extension. Image sets win if both contain it."""
        ext = Path(path).suffix.lower()
        if ext in self.image_exts:
            return Category.IMAGE
        if ext in self.video_exts:
            return Category.VIDEO
        return Category.OTHER

    def classify(self, files: Iterable[FileRecord]) -> ClassifiedFiles:
        """
        Partitions files by extension, then probes every image and video to
        decide whether it is already in its target encoding.

        A failed probe keeps the file in its category with converted=False.
        """
        result = ClassifiedFiles()
        for rec in files:
            rec.category = self.categorize(rec.path)
            if rec.category is Category.IMAGE:
                result.images.append(rec)
            elif rec.category is Category.VIDEO:
                result.videos.append(rec)
            else:
                result.others.append(rec)

        to_probe: List[FileRecord] = result.images + result.videos
        for rec in tqdm(to_probe, desc="Probing", disable=not self.show_progress or not to_probe):
            if rec.category is Category.IMAGE:
                self._probe_image(rec)
            else:
                self._probe_video(rec)

        logging.info(
            f"Classified {len(result.images)} images, {len(result.videos)} videos, "
            f"{len(result.others)} others ({len(result.needs_conversion())} need conversion)"
        )
        return result

    def _probe_image(self, rec: FileRecord):
        try:
            rec.mime_type = self.probe.probe_mime(rec.path)
        except ProbeError as e:
            self._record_failure(rec, e)
        rec.converted = rec.mime_type == config.TARGET_IMAGE_MIME

    def _probe_video(self, rec: FileRecord):
        # The two probes are independent: a mime failure must not hide the codec
        try:
            rec.mime_type = self.probe.probe_mime(rec.path)
        except ProbeError as e:
            self._record_failure(rec, e)
        try:
            rec.codec = self.probe.probe_video_codec(rec.path)
        except ProbeError as e:
            self._record_failure(rec, e)
        rec.converted = rec.codec == config.TARGET_VIDEO_CODEC

    def _record_failure(self, rec: FileRecord, err: ProbeError):
        logging.warning(str(err))
        rec.probe_error = err.cause if rec.probe_error is None else f"{rec.probe_error}; {err.cause}"
