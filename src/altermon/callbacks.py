"""Dynamic callback loading helpers."""
from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from types import ModuleType
from typing import Any, Callable, Dict, List, Union, cast

from .config import CallbackConfig
from .events import ChangeEvent

logger = logging.getLogger(__name__)

Changes = Union[List[ChangeEvent], ChangeEvent]

HandlerFunction = Callable[[Changes, Dict[str, Any]], None]


@dataclass
class ConfiguredCallback:
    """Handler function bound to the options from its configuration."""

    name: str
    handler: HandlerFunction
    options: Dict[str, Any]

    def __call__(self, changes: Changes) -> None:
        logger.debug("Dispatching changes to %s", self.name)
        try:
            self.handler(changes, self.options)
        except Exception:
            logger.exception("Callback %s failed for %s", self.name, _summarize(changes))


def load_callback(config: CallbackConfig) -> ConfiguredCallback:
    module = _import_module(config.module)
    try:
        handler = getattr(module, config.function)
    except AttributeError as exc:
        raise RuntimeError(
            f"Callback could not find function '{config.function}' in {config.module}"
        ) from exc

    if not callable(handler):
        raise RuntimeError(
            f"Callback attribute '{config.function}' in {config.module} is not callable"
        )

    return ConfiguredCallback(
        name=f"{config.module}.{config.function}",
        handler=cast(HandlerFunction, handler),
        options=dict(config.options or {}),
    )


def as_event_list(changes: Changes) -> List[ChangeEvent]:
    """Normalize a batch or a single event into a list."""

    if isinstance(changes, ChangeEvent):
        return [changes]
    return list(changes)


def _summarize(changes: Changes) -> str:
    events = as_event_list(changes)
    if len(events) == 1:
        return events[0].path
    return f"{len(events)} changes"


def _import_module(module_path: str) -> ModuleType:
    try:
        return importlib.import_module(module_path)
    except ImportError as exc:
        raise RuntimeError(f"Unable to import callback module '{module_path}'") from exc
