"""Built-in callbacks that can be referenced from configuration."""
from __future__ import annotations

import logging
import os
import shlex
import subprocess
from typing import Any, Dict

from .callbacks import Changes, as_event_list

logger = logging.getLogger(__name__)


def log_changes(changes: Changes, options: Dict[str, Any]) -> None:
    """Log every detected change."""

    level_name = str(options.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    message = options.get("message", "Alteration detected")

    for event in as_event_list(changes):
        logger.log(level, "%s: %s", message, event.describe())


def run_shell_command(changes: Changes, options: Dict[str, Any]) -> None:
    """Execute a templated shell command for each detected change."""

    template = options.get("command")
    if not template:
        logger.error("run_shell_command requires a 'command' option")
        return

    for event in as_event_list(changes):
        # file names come from the watched tree and must not reach the shell unquoted
        values = {
            "event": shlex.quote(event.event_type.value),
            "path": shlex.quote(event.path),
            "directory": shlex.quote(os.path.dirname(event.path)),
            "filename": shlex.quote(os.path.basename(event.path)),
        }
        try:
            command = str(template).format(**values)
        except KeyError as exc:
            logger.error("run_shell_command missing placeholder value for '%s'", exc)
            return

        logger.info("Executing shell command for %s: %s", event.path, command)
        try:
            subprocess.run(command, shell=True, check=True)
        except subprocess.CalledProcessError as exc:
            logger.error("Shell command failed (exit %s): %s", exc.returncode, command)
