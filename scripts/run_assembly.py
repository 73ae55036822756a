"""
Assemble a global point map from a structured scan report.

Loads scans from a YAML/JSON file, places every scan into the frame of the
reference scan and logs the number of unique points and the largest Manhattan
distance between two sensors.
"""

import sys
import argparse
import logging
from pathlib import Path

# Add the src to the path to import modules
sys.path.append(str(Path(__file__).parent.parent / "src"))

from scanner_registration.acceleration import ScanParallelExecutor
from scanner_registration.preprocessing import ScanLoader
from scanner_registration.registration import MapAssembler, RegistrationError
from scanner_registration.utils.config import load_config, AppConfig
from scanner_registration.utils.logging import setup_logger, set_package_level


def main() -> int:
    parser = argparse.ArgumentParser(description="Scanner Registration")
    parser.add_argument(
        "scans",
        type=str,
        help="Path to a YAML or JSON scan report",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file (defaults to config/default.yaml)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Match scans in this many worker processes (overrides parallel config).",
    )
    parser.add_argument(
        "--exhaustive",
        action="store_true",
        help="Try every map point as anchor on every pass instead of the extreme points first.",
    )
    args = parser.parse_args()

    cfg: AppConfig = load_config(args.config)
    if args.workers is not None:
        cfg.parallel.enabled = args.workers > 1
        cfg.parallel.n_workers = args.workers
    if args.exhaustive:
        cfg.matching.anchor_sampling = "exhaustive"

    log_level = getattr(logging, cfg.logging.level.upper(), logging.INFO)
    logger = setup_logger(__name__, level=log_level, log_file=cfg.logging.file)
    set_package_level(log_level)

    logger.info("Scanner Registration")
    logger.info("====================")

    try:
        scans = ScanLoader().load(args.scans)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Could not load scans: {e}")
        return 2

    executor = ScanParallelExecutor(cfg.parallel.n_workers) if cfg.parallel.enabled else None
    assembler = MapAssembler.from_config(cfg, executor=executor)

    try:
        result = assembler.assemble(scans)
    except (RegistrationError, ValueError) as e:
        logger.error(f"Registration failed: {e}")
        return 1

    logger.info(f"Unique points: {result.point_count}")
    logger.info(f"Largest sensor distance: {result.max_sensor_distance}")
    for scan_id in result.order:
        logger.info(f"  scan {scan_id}: sensor at {result.sensors[scan_id]}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
