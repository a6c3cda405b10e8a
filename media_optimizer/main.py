import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import config
from .core import MediaOptimizerApp
from .exceptions import CatalogWriteError, MissingDependencyError, NotFoundError
from .models import OutputPlacement, RunConfig
from .probing.probe import LibraryProbeClient, SubprocessProbeClient

def setup_logging(output_dir: Path, verbose: bool):
    """
    Logs to a file in the output directory, normal output to stdout and
    warnings/errors to stderr.
    """
    log_level = logging.DEBUG if verbose else logging.INFO

    # Create the output dir if it doesn't exist so we can log there
    created = not output_dir.exists()
    output_dir.mkdir(parents=True, exist_ok=True)
    log_file = output_dir / config.LOG_NAME

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.addFilter(lambda record: record.levelno < logging.WARNING)
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.FileHandler(log_file, encoding='utf-8'),
            stdout_handler,
            stderr_handler,
        ],
        force=True,
    )

    # Silence chatty libraries
    logging.getLogger("PIL").setLevel(logging.WARNING)

    if created:
        logging.info(f"Output directory created at {output_dir}")

def parse_args(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(
        prog="media-optimizer",
        description="Media Optimizer: convert images to WebP and videos to HEVC, and catalog every file",
    )

    p.add_argument("src", type=Path, help="Source directory to scan")
    p.add_argument("-o", "--output", default=config.DEFAULT_OUTPUT_DIR,
                   help="Output directory; relative paths are placed next to the source directory (default: converted)")
    p.add_argument("-r", "--replace", action="store_true", help="Replace files in the source directory")

    p.add_argument("--placement", choices=[m.value for m in OutputPlacement], default=None,
                   help="Where converted files go (default: in_place with --replace, mirrored otherwise)")
    p.add_argument("-q", "--quality", type=webp_quality, default=config.DEFAULT_WEBP_QUALITY, help="WebP quality (0-100)")
    p.add_argument("--dry-run", action="store_true", help="Plan conversions without running encoders")
    p.add_argument("--db", type=Path, default=None, help="Custom path for the catalog (default: output/files.db)")
    p.add_argument("--probe-backend", choices=["cli", "library"], default="cli",
                   help="Probe with file/ffprobe (cli) or with Pillow/MediaInfo (library)")
    p.add_argument("--report-csv", type=Path, default=None, help="Write a per-file CSV report of the run")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    return p.parse_args(argv)

def webp_quality(value: str) -> int:
    """argparse type: an integer quality between 0 and 100."""
    try:
        q = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"quality must be an integer, got {value!r}")
    if not 0 <= q <= 100:
        raise argparse.ArgumentTypeError(f"quality must be between 0 and 100, got {q}")
    return q

def resolve_output_dir(src_root: Path, output: str) -> Path:
    """Relative output paths are siblings of the source directory."""
    out = Path(output).expanduser()
    if out.is_absolute():
        return out.resolve()
    return (src_root.parent / out).resolve()

def build_run_config(args) -> RunConfig:
    src_root = args.src.resolve()
    if args.placement:
        placement = OutputPlacement(args.placement)
    else:
        placement = OutputPlacement.IN_PLACE if args.replace else OutputPlacement.MIRRORED

    return RunConfig(
        source_dir=src_root,
        output_dir=resolve_output_dir(src_root, args.output),
        replace_in_place=args.replace,
        placement=placement,
        webp_quality=args.quality,
        dry_run=args.dry_run,
        db_path=args.db.resolve() if args.db else None,
    )

def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)
    run_config = build_run_config(args)

    setup_logging(run_config.output_dir, args.verbose)

    logging.info("=== Media Optimizer Started ===")
    logging.info(f"Source: {run_config.source_dir}")
    logging.info(f"Output: {run_config.output_dir}")

    probe = LibraryProbeClient() if args.probe_backend == "library" else SubprocessProbeClient()
    app = MediaOptimizerApp(run_config, probe=probe)

    try:
        app.run(report_csv=args.report_csv)
    except MissingDependencyError as e:
        logging.error(str(e))
        sys.exit(1)
    except NotFoundError as e:
        logging.error(str(e))
        sys.exit(1)
    except CatalogWriteError as e:
        logging.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        sys.exit(1)
    except Exception:
        logging.exception("Fatal error during optimization.")
        sys.exit(1)

    sys.exit(0)

if __name__ == "__main__":
    main()
