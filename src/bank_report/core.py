from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from bank_report.config import ReportConfig
from bank_report.document import ReportDocument


@dataclass
class StageResult:
    name: str = ""
    status: str = "success"
    outputs: Dict[str, Any] = field(default_factory=dict)
    details: Optional[str] = None
    artifacts: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PipelineContext:
    config: ReportConfig
    workdir: Path = field(default_factory=Path.cwd)
    document: ReportDocument = field(default_factory=ReportDocument)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("bank_report"))

    def stage(self, name: str, *, required: bool = True) -> Dict[str, Any]:
        return self.config.stage(name, required=required)

    def logging(self, name: str) -> Dict[str, Any]:
        return self.config.logging(name)

    def resolve(self, path: str | Path) -> Path:
        """Resolve a config path against the working directory."""
        candidate = Path(path).expanduser()
        if candidate.is_absolute():
            return candidate
        return Path(self.workdir) / candidate
