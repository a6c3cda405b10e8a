import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .classification.classifier import Classifier
from .conversion.encoder import Encoder, SubprocessEncoder, check_dependencies
from .conversion.executor import ConversionExecutor
from .conversion.planner import ConversionPlanner
from .database.writer import CatalogWriter
from .models import ClassifiedFiles, ConversionJob, ConversionResult, FileRecord, RunConfig
from .probing.probe import ProbeClient, SubprocessProbeClient
from .reporting import ReportGenerator
from .scanning.filesystem import DiskScanner


@dataclass
class RunSummary:
    records: List[FileRecord] = field(default_factory=list)
    classified: ClassifiedFiles = field(default_factory=ClassifiedFiles)
    jobs: List[ConversionJob] = field(default_factory=list)
    results: List[ConversionResult] = field(default_factory=list)
    catalog_path: Optional[Path] = None

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)


class MediaOptimizerApp:
    def __init__(self,
                 run_config: RunConfig,
                 probe: Optional[ProbeClient] = None,
                 encoder: Optional[Encoder] = None,
                 show_progress: bool = True):
        self.run_config = run_config
        self.probe = probe or SubprocessProbeClient()
        self.encoder = encoder or SubprocessEncoder(webp_quality=run_config.webp_quality)
        self.show_progress = show_progress

    def run(self, report_csv: Optional[Path] = None) -> RunSummary:
        """
        Executes one optimization run.
        0. Check encoders (before anything touches the source tree)
        1. List files
        2. Classify & Probe
        3. Plan conversions
        4. Execute (skipped on dry run)
        5. Write catalog
        """
        cfg = self.run_config
        summary = RunSummary()

        # --- Step 0: Dependencies ---
        check_dependencies(self.encoder.required_tools)

        # --- Step 1: Listing ---
        logging.info(f"Scanning {cfg.source_dir}...")
        # Never re-ingest our own outputs when the output dir sits inside the source tree
        skip_dirs = set() if cfg.output_dir.resolve() == cfg.source_dir.resolve() else {cfg.output_dir}
        summary.records = DiskScanner().list_files(cfg.source_dir, skip_dirs=skip_dirs)

        # --- Step 2: Classification ---
        classifier = Classifier(self.probe, cfg.image_exts, cfg.video_exts, show_progress=self.show_progress)
        summary.classified = classifier.classify(summary.records)

        # --- Step 3: Planning ---
        summary.jobs = ConversionPlanner(cfg).plan(summary.classified)

        # --- Step 4: Execution ---
        executor = ConversionExecutor(self.encoder, dry_run=cfg.dry_run, show_progress=self.show_progress)
        summary.results = executor.execute_all(summary.jobs)

        # --- Step 5: Catalog ---
        summary.catalog_path = CatalogWriter(cfg.catalog_path).write(summary.records, summary.results)

        if report_csv:
            ReportGenerator().write_run_report(summary.records, summary.results, report_csv)

        logging.info(
            f"Run complete. {len(summary.records)} files, {len(summary.jobs)} conversions planned, "
            f"{summary.failed} failed."
        )
        return summary
