"""
Result models and the aggregation of raw process output into them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict


class PingResult(BaseModel):
    """Captured outcome of one (or a batch of) ping invocations."""

    model_config = ConfigDict(frozen=True)

    exit_code: int
    std_output: Optional[str] = None
    std_error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    def lines(self) -> List[str]:
        """Standard output split into lines."""
        if self.std_output is None:
            return []
        return self.std_output.split("\n")

    def as_tuple(self) -> Tuple[int, Optional[str]]:
        """(exit_code, std_output), for callers that unpack a result."""
        return self.exit_code, self.std_output


@dataclass(frozen=True)
class RawRun:
    """Unprocessed capture from ProcessRunner."""

    exit_code: int
    stdout: str
    stderr: str
    cancelled: bool = False
    spawned: bool = True


class OutcomeKind(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    LAUNCH_FAILED = "launch_failed"


@dataclass(frozen=True)
class RunOutcome:
    """
    How a run ended.

    Every observation API (blocking wait, await, batch merge) decides what
    to return or raise from this one value.
    """

    kind: OutcomeKind
    result: Optional[PingResult] = None
    error: Optional[BaseException] = None

    @classmethod
    def completed(cls, result: PingResult) -> "RunOutcome":
        return cls(OutcomeKind.COMPLETED, result=result)

    @classmethod
    def cancelled(cls, partial: Optional[PingResult] = None) -> "RunOutcome":
        return cls(OutcomeKind.CANCELLED, result=partial)

    @classmethod
    def launch_failed(cls, error: BaseException) -> "RunOutcome":
        return cls(OutcomeKind.LAUNCH_FAILED, error=error)


class ResultAggregator:
    """Turn raw captures into PingResult values. Pure and non-raising."""

    @staticmethod
    def normalize(text: Optional[str]) -> str:
        """
        Normalize line endings and strip one leading and one trailing newline.

        Windows ping opens its report with a blank line and ends with a line
        terminator; both are platform artifacts. Blank lines inside the text
        are content and are kept.
        """
        if not text:
            return ""
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        if text.startswith("\n"):
            text = text[1:]
        if text.endswith("\n"):
            text = text[:-1]
        return text

    @classmethod
    def build(cls, raw: RawRun) -> PingResult:
        return PingResult(
            exit_code=raw.exit_code,
            std_output=cls.normalize(raw.stdout),
            std_error=cls.normalize(raw.stderr),
        )

    @classmethod
    def to_outcome(cls, raw: RawRun) -> RunOutcome:
        if raw.cancelled:
            # Nothing ran, so there is no exit code to report.
            partial = cls.build(raw) if raw.spawned else None
            return RunOutcome.cancelled(partial)
        return RunOutcome.completed(cls.build(raw))

    @staticmethod
    def combine(results: Sequence[PingResult]) -> PingResult:
        """
        Merge per-target results in the order given.

        Exit code is 0 only when every result is 0, otherwise the first
        non-zero code in sequence order.
        """
        if not results:
            return PingResult(exit_code=0, std_output=None, std_error=None)

        exit_code = next((r.exit_code for r in results if r.exit_code != 0), 0)
        std_output = "\n".join(r.std_output for r in results if r.std_output)
        std_error = "\n".join(r.std_error for r in results if r.std_error)

        return PingResult(
            exit_code=exit_code,
            std_output=std_output,
            std_error=std_error,
        )
