import logging
from pathlib import Path
from typing import List, Set

from .. import config
from ..models import (
    Category,
    ClassifiedFiles,
    ConversionJob,
    FileRecord,
    JobKind,
    OutputPlacement,
    RunConfig,
)


class ConversionPlanner:
    def __init__(self, run_config: RunConfig):
        self.run_config = run_config
        # Targets claimed within this plan, used for in-place collision checks
        self.used_targets: Set[Path] = set()

    def plan(self, classified: ClassifiedFiles) -> List[ConversionJob]:
        """
        One job per image/video that is not already converted, images first.
        """
        jobs = []
        for rec in classified.needs_conversion():
            kind = JobKind.IMAGE_TO_WEBP if rec.category is Category.IMAGE else JobKind.VIDEO_TO_HEVC
            output = self.output_path_for(rec, kind)
            self.used_targets.add(output)
            jobs.append(ConversionJob(
                kind=kind,
                record=rec,
                output=output,
                replace_source=self.run_config.placement is OutputPlacement.IN_PLACE,
            ))

        logging.info(f"Planned {len(jobs)} conversions (placement={self.run_config.placement.value})")
        return jobs

    def output_path_for(self, rec: FileRecord, kind: JobKind) -> Path:
        suffix = config.IMAGE_TARGET_SUFFIX if kind is JobKind.IMAGE_TO_WEBP else config.VIDEO_TARGET_SUFFIX
        src = rec.path
        appended = src.with_name(src.name + suffix)
        placement = self.run_config.placement

        if placement is OutputPlacement.SIBLING:
            return appended

        if placement is OutputPlacement.MIRRORED:
            try:
                rel = src.relative_to(self.run_config.source_dir)
            except ValueError:
                # Outside the source tree; keep just the name
                rel = Path(src.name)
            return self.run_config.output_dir / rel.with_name(rel.name + suffix)

        # In place: x.png -> x.webp, unless another source already claimed it
        replaced = src.with_suffix(suffix)
        if replaced in self.used_targets or (replaced.exists() and replaced != src):
            logging.debug(f"Target {replaced} already taken, using {appended}")
            return appended
        return replaced
