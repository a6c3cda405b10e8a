import logging
from typing import List

from tqdm import tqdm

from ..exceptions import ConversionError
from ..models import (
    STATUS_CONVERTED,
    STATUS_DRY_RUN,
    STATUS_FAILED,
    STATUS_SKIPPED,
    ConversionJob,
    ConversionResult,
)
from .encoder import Encoder


class ConversionExecutor:
    def __init__(self, encoder: Encoder, dry_run: bool = False, show_progress: bool = True):
        self.encoder = encoder
        self.dry_run = dry_run
        self.show_progress = show_progress

    def execute_all(self, jobs: List[ConversionJob]) -> List[ConversionResult]:
        """
        Runs jobs one at a time. A failed job is recorded and the batch continues.
        """
        if not jobs:
            logging.info("No files need converting.")
            return []

        logging.info(f"Converting {len(jobs)} files (DryRun={self.dry_run})...")
        results = [self.execute(job) for job in tqdm(jobs, desc="Converting", disable=not self.show_progress)]

        failed = sum(1 for r in results if r.status == STATUS_FAILED)
        if failed:
            logging.warning(f"{failed} of {len(results)} conversions failed.")
        return results

    def execute(self, job: ConversionJob) -> ConversionResult:
        if self.dry_run:
            logging.info(f"[DRY RUN] {job.kind.value}: {job.source} -> {job.output}")
            return ConversionResult(job=job, success=True, output_path=job.output, status=STATUS_DRY_RUN)

        # Output from an earlier run: leave it alone
        if job.output.exists():
            logging.info(f"Skipping {job.source}: {job.output} already exists")
            return ConversionResult(job=job, success=True, output_path=job.output, status=STATUS_SKIPPED)

        try:
            job.output.parent.mkdir(parents=True, exist_ok=True)
            stderr = self.encoder.encode(job)
        except ConversionError as e:
            logging.error(str(e))
            # Encoders can leave a truncated file behind; a later run would skip it
            self._discard_partial(job)
            return ConversionResult(job=job, success=False, stderr=e.stderr, status=STATUS_FAILED)
        except OSError as e:
            logging.error(f"Failed to prepare {job.output}: {e}")
            return ConversionResult(job=job, success=False, stderr=str(e), status=STATUS_FAILED)

        if job.replace_source and job.output != job.source:
            try:
                job.source.unlink()
                logging.debug(f"Replaced {job.source} with {job.output}")
            except OSError as e:
                logging.warning(f"Converted but could not remove {job.source}: {e}")

        return ConversionResult(job=job, success=True, output_path=job.output, stderr=stderr, status=STATUS_CONVERTED)

    def _discard_partial(self, job: ConversionJob):
        # Only reached when the output did not exist before this job ran
        try:
            job.output.unlink(missing_ok=True)
        except OSError as e:
            logging.warning(f"Could not remove partial output {job.output}: {e}")
