from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from bank_report.common.logging_setup import setup_logging
from .core import PipelineContext


def stage_logger(context: PipelineContext, stage_name: str, *, force: bool = False) -> logging.Logger:
    """
    Configure logging for a stage and return a namespaced logger.

    A relative log file lands under the context's workdir.
    """
    cfg = context.logging(stage_name)
    log_cfg = dict(cfg.get("logging") or {})
    if log_cfg.get("file"):
        log_cfg["file"] = str(context.resolve(log_cfg["file"]))
    setup_logging({**cfg, "logging": log_cfg}, force=force)
    return logging.getLogger(f"bank_report.{stage_name}")


def bool_from_cfg(value: Optional[bool], default: bool = False) -> bool:
    if value is None:
        return default
    return bool(value)


def require(cfg: Mapping[str, Any], key: str, *, stage: str) -> Any:
    """Fetch a mandatory key from a stage block."""
    value = cfg.get(key)
    if value is None:
        raise KeyError(f"Stage '{stage}' is missing required setting '{key}'")
    return value
