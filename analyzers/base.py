"""
Base Analyzer class and FacetRunner
Product Insight Engine
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
from datetime import datetime
import logging
import traceback
import time

from analyzers.errors import AnalysisError, InternalError

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Standardized result envelope returned by every analyzer."""
    analyzer_name: str
    success: bool
    data: Any = None
    error: Optional[str] = None
    error_kind: Optional[str] = None      # validation | upstream | internal
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None

    def __repr__(self):
        status = "ok" if self.success else f"failed[{self.error_kind}]"
        dur = f" ({self.duration_seconds:.3f}s)" if self.duration_seconds else ""
        return f"{self.analyzer_name}: {status}{dur}"


class Analyzer(ABC):
    """
    Abstract base class for all scoring analyzers.
    Subclasses implement `run(payload)` as a pure function of the payload.
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"analyzer.{name}")

    @abstractmethod
    def run(self, payload: Any) -> Any:
        raise NotImplementedError

    def execute(self, payload: Any) -> AnalysisResult:
        """
        Wraps `run()` with timing, structured logging, and error handling.
        Engine errors keep their message; anything else is reported with the
        generic internal-error message only.
        """
        started_at = datetime.utcnow()
        self.logger.debug(f"[{self.name}] Starting...")
        try:
            result = self.run(payload)
        except AnalysisError as e:
            finished_at = datetime.utcnow()
            level = logging.ERROR if isinstance(e, InternalError) else logging.WARNING
            self.logger.log(level, f"[{self.name}] {e.kind} error: {e}")
            return AnalysisResult(
                analyzer_name=self.name,
                success=False,
                error=str(e),
                error_kind=e.kind,
                started_at=started_at,
                finished_at=finished_at,
            )
        except Exception as e:
            finished_at = datetime.utcnow()
            self.logger.error(f"[{self.name}] Failed: {e}\n{traceback.format_exc()}")
            return AnalysisResult(
                analyzer_name=self.name,
                success=False,
                error=InternalError.GENERIC_MESSAGE,
                error_kind=InternalError.kind,
                started_at=started_at,
                finished_at=finished_at,
            )

        finished_at = datetime.utcnow()
        duration = (finished_at - started_at).total_seconds()
        self.logger.debug(f"[{self.name}] Completed in {duration:.3f}s")
        return AnalysisResult(
            analyzer_name=self.name,
            success=True,
            data=result,
            started_at=started_at,
            finished_at=finished_at,
        )

    def __repr__(self):
        return f"<Analyzer: {self.name}>"


@dataclass
class FacetReport:
    """Outcome of running several independent facets over one request."""
    results: Dict[str, AnalysisResult] = field(default_factory=dict)

    @property
    def data(self) -> Dict[str, Any]:
        return {
            facet: (r.data if r.success else None)
            for facet, r in self.results.items()
        }

    @property
    def errors(self) -> Dict[str, Dict[str, str]]:
        return {
            facet: {"kind": r.error_kind, "message": r.error}
            for facet, r in self.results.items()
            if not r.success
        }

    @property
    def succeeded(self) -> List[str]:
        return [facet for facet, r in self.results.items() if r.success]


class FacetRunner:
    """
    Runs independent analyzers over their own payloads.
    A failing facet never prevents the others from completing.
    """

    def __init__(self, analyzers: Dict[str, Analyzer]):
        self.analyzers = analyzers
        self.logger = logging.getLogger("facet_runner")

    def execute(self, payloads: Dict[str, Any]) -> FacetReport:
        """Execute every facet that has a payload; facets without one are skipped."""
        report = FacetReport()
        total_start = time.time()

        for facet, analyzer in self.analyzers.items():
            if facet not in payloads:
                continue
            report.results[facet] = analyzer.execute(payloads[facet])

        elapsed = time.time() - total_start
        self.logger.info(
            f"Facets complete: {len(report.succeeded)}/{len(report.results)} succeeded "
            f"in {elapsed:.3f}s"
        )
        return report
