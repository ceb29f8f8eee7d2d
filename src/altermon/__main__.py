"""Command-line entry point for the alteration monitor."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .callbacks import load_callback
from .config import ConfigError, load_config
from .monitor import AlterationMonitor
from .resources import FilesystemLister, StatError


def main() -> None:
    parser = argparse.ArgumentParser(description="Watch directories for file and directory alterations")
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to the YAML configuration file (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    config_path = Path(args.config)
    try:
        app_config = load_config(config_path)
    except ConfigError as exc:
        logging.error("%s", exc)
        raise SystemExit(2) from exc

    monitor_cfg = app_config.monitor
    lister = FilesystemLister(
        recursive=monitor_cfg.recursive,
        include_patterns=monitor_cfg.include_patterns,
        exclude_patterns=monitor_cfg.exclude_patterns,
    )
    monitor = AlterationMonitor(
        [str(directory) for directory in monitor_cfg.directories],
        load_callback(app_config.callback),
        monitor_cfg.invokes_callback_for_each_file,
        scan_interval_min=monitor_cfg.scan_interval_min,
        lister=lister,
    )
    try:
        monitor.monitor()
    except KeyboardInterrupt:
        logging.info("Monitor interrupted by user")
    except StatError as exc:
        logging.error("%s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
