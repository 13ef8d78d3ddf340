"""Pure dataclasses for the answer consensus pipeline. No logic, no deps."""

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class Question:
    text: str
    source: str  # "cli" or file path


@dataclass(frozen=True)
class AttemptConfig:
    attempt_index: int     # 1-indexed
    total_attempts: int


@dataclass(frozen=True)
class ParsedAnswer:
    analysis: str
    answer: str
    confidence: str        # free text, normally High/Medium/Low
    full_text: str


@dataclass(frozen=True)
class Attempt:
    attempt_index: int
    raw_response: str
    parsed: ParsedAnswer


@dataclass(frozen=True)
class ConsensusResult:
    representative: Attempt | None
    agreement_count: int
    total_attempts: int
    is_consensus: bool


class RunStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SUPERSEDED = "superseded"


@dataclass
class RunState:
    question: Question | None = None
    total_attempts: int = 0
    status: RunStatus = RunStatus.IDLE
    attempts: list[Attempt] = field(default_factory=list)
    error: Exception | None = None
