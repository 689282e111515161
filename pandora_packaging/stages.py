"""Stage results and the fail-fast pipeline executor."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Sequence

from loguru import logger

from .logger import log_stage_event


class FailureKind(str, Enum):
    TOOLCHAIN_MISMATCH = "toolchain_mismatch"
    STAGE_FAILURE = "stage_failure"


class PipelineState(str, Enum):
    START = "start"
    BUILT = "built"
    POST_PROCESSED = "post_processed"
    PACKAGED = "packaged"
    RENAMED = "renamed"
    DONE = "done"
    FAILED = "failed"


@dataclass(slots=True)
class StageResult:
    """Outcome of one sub-step; failures are values, not exceptions."""

    label: str
    success: bool
    detail: str
    returncode: int = 0
    kind: Optional[FailureKind] = None
    outputs: list[Path] = field(default_factory=list)

    @classmethod
    def ok(cls, label: str, detail: str, outputs: Sequence[Path] = ()) -> "StageResult":
        return cls(label=label, success=True, detail=detail, outputs=list(outputs))

    @classmethod
    def failed(
        cls,
        label: str,
        detail: str,
        returncode: int = 1,
        kind: FailureKind = FailureKind.STAGE_FAILURE,
    ) -> "StageResult":
        return cls(label=label, success=False, detail=detail, returncode=returncode or 1, kind=kind)

    @classmethod
    def from_process(
        cls,
        label: str,
        completed: subprocess.CompletedProcess[str],
        description: str,
    ) -> "StageResult":
        if completed.returncode == 0:
            return cls.ok(label, f"{description} succeeded")
        return cls.failed(label, f"{description} exited with status {completed.returncode}", completed.returncode)


Stage = Callable[[list[Path]], StageResult]


@dataclass(slots=True)
class PipelineResult:
    state: PipelineState = PipelineState.START
    results: list[StageResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.state is PipelineState.DONE

    @property
    def failure(self) -> Optional[StageResult]:
        return next((result for result in self.results if not result.success), None)

    @property
    def artifact(self) -> Optional[Path]:
        """Final renamed artifact, once the pipeline got that far."""

        for result in reversed(self.results):
            if result.label == "rename" and result.outputs:
                return result.outputs[0]
        return None

    @property
    def exit_code(self) -> int:
        if self.success:
            return 0
        failure = self.failure
        return failure.returncode if failure else 1


def run_stages(stages: Sequence[tuple[PipelineState, Stage]], **context: str) -> PipelineResult:
    """Run ``stages`` in order, feeding each the previous stage's outputs.

    The first failed result moves the pipeline to ``FAILED`` and nothing after
    it runs. ``context`` is attached to every structured stage event.
    """

    pipeline = PipelineResult()
    inputs: list[Path] = []
    for next_state, stage in stages:
        result = stage(inputs)
        pipeline.results.append(result)
        if not result.success:
            pipeline.state = PipelineState.FAILED
            logger.error("Stage {} failed: {}", result.label, result.detail)
            log_stage_event(
                "stage_failed",
                stage=result.label,
                kind=result.kind.value if result.kind else None,
                returncode=result.returncode,
                **context,
            )
            return pipeline
        pipeline.state = next_state
        log_stage_event("stage_completed", stage=result.label, state=next_state.value, **context)
        inputs = result.outputs

    pipeline.state = PipelineState.DONE
    return pipeline


__all__ = ["FailureKind", "PipelineResult", "PipelineState", "Stage", "StageResult", "run_stages"]
