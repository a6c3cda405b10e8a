import csv
import logging
from pathlib import Path
from typing import Dict, Iterable, List

from .models import (
    STATUS_CONVERTED,
    STATUS_DRY_RUN,
    STATUS_FAILED,
    STATUS_SKIPPED,
    Category,
    ConversionResult,
    FileRecord,
)

HEADERS = [
    "Path",
    "Category",
    "Codec/Mime",
    "Already Converted",
    "Action",
    "Output Path",
    "Notes",
]

ACTION_LABELS = {
    STATUS_CONVERTED: "Converted",
    STATUS_FAILED: "Failed",
    STATUS_SKIPPED: "Skipped (Output Exists)",
    STATUS_DRY_RUN: "Planned (Dry Run)",
}


class ReportGenerator:
    def write_run_report(self,
                         records: Iterable[FileRecord],
                         results: Iterable[ConversionResult],
                         output_csv: Path) -> int:
        """
        Writes one CSV row per examined file describing what the run did with it.
        Returns the number of rows written.
        """
        by_source: Dict[Path, ConversionResult] = {r.job.source: r for r in results}

        output_csv = Path(output_csv)
        output_csv.parent.mkdir(parents=True, exist_ok=True)

        count = 0
        with open(output_csv, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(HEADERS)
            for rec in records:
                writer.writerow(self._row(rec, by_source.get(rec.path)))
                count += 1

        logging.info(f"Report complete: {count} files -> {output_csv}")
        return count

    def _row(self, rec: FileRecord, result) -> List[str]:
        base = [str(rec.path), rec.category.value, rec.codec_or_mime or "", "yes" if rec.converted else "no"]

        if rec.category is Category.OTHER:
            return base + ["Ignored", "", "Unsupported extension"]
        if rec.converted:
            return base + ["None", "", ""]
        if result is None:
            return base + ["Not Planned", "", rec.probe_error or ""]

        notes = result.stderr if result.status == STATUS_FAILED else (rec.probe_error or "")
        output = str(result.output_path) if result.output_path else ""
        return base + [ACTION_LABELS.get(result.status, result.status), output, notes]
