"""
Timing and statistics records for an extraction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

PHASES = (
    "markup_parsing_time",
    "document_construction_time",
    "article_processing_time",
    "formatting_time",
)


@dataclass(slots=True, frozen=True)
class TimingInfo:
    """Seconds spent in each extraction phase."""

    markup_parsing_time: float = 0.0
    document_construction_time: float = 0.0
    article_processing_time: float = 0.0
    formatting_time: float = 0.0
    other_times: Mapping[str, float] = field(default_factory=dict)

    @property
    def total_time(self) -> float:
        return (
            self.markup_parsing_time
            + self.document_construction_time
            + self.article_processing_time
            + self.formatting_time
            + sum(self.other_times.values())
        )


@dataclass(slots=True, frozen=True)
class StatisticsInfo:
    word_count: int = 0


class TimingRecorder:
    """
    Accumulates phase timings; each phase is written once per run.

    ``snapshot`` hands out an immutable ``TimingInfo`` so callers cannot
    change what the extractor recorded.
    """

    def __init__(self) -> None:
        self._phases: Dict[str, float] = {}
        self._other: Dict[str, float] = {}

    def record(self, phase: str, seconds: float) -> None:
        if phase not in PHASES:
            raise ValueError(f"Unknown timing phase: {phase}")
        if phase in self._phases:
            raise ValueError(f"Timing for {phase} already recorded")
        self._phases[phase] = seconds

    def record_other(self, name: str, seconds: float) -> None:
        self._other[name] = seconds

    def clear(self, *phases: str) -> None:
        for phase in phases:
            self._phases.pop(phase, None)

    def get(self, phase: str) -> Optional[float]:
        return self._phases.get(phase)

    def snapshot(self) -> TimingInfo:
        return TimingInfo(**self._phases, other_times=dict(self._other))
