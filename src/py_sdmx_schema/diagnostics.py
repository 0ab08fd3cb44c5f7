"""
Collector for degraded-data warnings raised during extraction.

Extraction functions accept an optional Diagnostics instance. Every warning is
recorded on it and also written to the module logger, so callers can inspect
what was absorbed without capturing log output.
"""

import logging
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DiagnosticWarning(BaseModel):
    """A single non-fatal problem found in a source document."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(description="Stable machine-readable identifier.")
    message: str = Field(description="Human-readable explanation.")
    context: Dict[str, str] = Field(
        default_factory=dict, description="Element ids and raw values involved."
    )


class Diagnostics:
    """Accumulates DiagnosticWarning records for one or more extractions."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.warnings: List[DiagnosticWarning] = []
        self._logger = logger or logging.getLogger(__name__)

    def warn(self, code: str, message: str, **context: str) -> DiagnosticWarning:
        warning = DiagnosticWarning(code=code, message=message, context=context)
        self.warnings.append(warning)
        self._logger.warning(message)
        return warning

    def codes(self) -> List[str]:
        return [w.code for w in self.warnings]

    def __len__(self) -> int:
        return len(self.warnings)
