"""Attempt orchestration: sequential model calls, progressive publishing, abort on failure."""

import asyncio
import logging
from collections.abc import Callable, Sequence

from answer_consensus.attachments import Attachment
from answer_consensus.consensus import ANSWER_PREFIX_LEN, aggregate
from answer_consensus.models import (
    Attempt,
    AttemptConfig,
    ConsensusResult,
    Question,
    RunState,
    RunStatus,
)
from answer_consensus.parser import parse_response
from answer_consensus.prompts import build_prompt
from answer_consensus.providers.base import AIProvider, ProviderError
from config.config_loader import PromptsConfig, SamplingConfig

logger = logging.getLogger(__name__)

# Pause between attempts so the remote service does not see a burst
DEFAULT_PACING_SEC = 0.5


class ValidationError(ValueError):
    """Raised before any model call when the run request is unusable."""


class AttemptRunner:
    """Runs one question through N sequential attempts against a single provider.

    The runner owns only the current run's RunState. Starting a new run
    replaces it; a response that arrives for the replaced run is dropped.
    """

    def __init__(
        self,
        provider: AIProvider,
        prompts: PromptsConfig,
        sampling: SamplingConfig,
        pacing_sec: float = DEFAULT_PACING_SEC,
        answer_prefix_len: int = ANSWER_PREFIX_LEN,
    ) -> None:
        self._provider = provider
        self._prompts = prompts
        self._sampling = sampling
        self._pacing_sec = pacing_sec
        self._answer_prefix_len = answer_prefix_len
        self._state = RunState()

    @property
    def state(self) -> RunState:
        return self._state

    def consensus(self) -> ConsensusResult | None:
        """Consensus over the current run's attempts, recomputed on every call."""
        return aggregate(self._state.attempts, self._answer_prefix_len)

    def _is_current(self, state: RunState) -> bool:
        return state is self._state

    async def run(
        self,
        question: Question,
        total_attempts: int,
        attachments: Sequence[Attachment] = (),
        on_attempt: Callable[[RunState], None] | None = None,
    ) -> RunState:
        """Run all attempts for a question.

        Args:
            question: The question to answer.
            total_attempts: Number of sequential attempts (>= 1).
            attachments: File summaries folded into every prompt.
            on_attempt: Optional callback invoked with the run state after
                each attempt is appended.

        Returns:
            The finished RunState (COMPLETED, or SUPERSEDED if another run
            started while this one was waiting).

        Raises:
            ValidationError: Blank question or total_attempts < 1.
            ProviderError: The attempt that failed; the run state is left
                FAILED with the attempts collected so far.
        """
        if not question.text.strip():
            raise ValidationError("Please enter a question")
        if total_attempts < 1:
            raise ValidationError(f"Number of attempts must be at least 1, got {total_attempts}")

        state = RunState(
            question=question,
            total_attempts=total_attempts,
            status=RunStatus.RUNNING,
        )
        self._state = state
        logger.info(
            "Starting run: %d attempts via %s (%s)",
            total_attempts,
            self._provider.name(),
            self._provider.model_string(),
        )

        for attempt_index in range(1, total_attempts + 1):
            if not self._is_current(state):
                return self._supersede(state, attempt_index)

            attempt_config = AttemptConfig(attempt_index=attempt_index, total_attempts=total_attempts)
            prompt = build_prompt(question, attempt_config, self._prompts, attachments)
            sampling = self._sampling.for_attempt(attempt_index)

            try:
                raw = await self._provider.invoke(prompt, sampling)
            except ProviderError as exc:
                if not self._is_current(state):
                    return self._supersede(state, attempt_index)
                state.status = RunStatus.FAILED
                state.error = exc
                logger.error(
                    "Attempt %d/%d failed, aborting run with %d attempt(s) collected: %s",
                    attempt_index,
                    total_attempts,
                    len(state.attempts),
                    exc,
                )
                raise

            if not self._is_current(state):
                return self._supersede(state, attempt_index)

            attempt = Attempt(
                attempt_index=attempt_index,
                raw_response=raw,
                parsed=parse_response(raw),
            )
            state.attempts.append(attempt)
            logger.info(
                "Attempt %d/%d complete (confidence: %s)",
                attempt_index,
                total_attempts,
                attempt.parsed.confidence or "not specified",
            )

            if on_attempt:
                on_attempt(state)

            if attempt_index < total_attempts:
                await asyncio.sleep(self._pacing_sec)

        state.status = RunStatus.COMPLETED
        return state

    def _supersede(self, state: RunState, attempt_index: int) -> RunState:
        logger.warning(
            "Run superseded, discarding attempt %d for question: %.60s",
            attempt_index,
            state.question.text if state.question else "",
        )
        state.status = RunStatus.SUPERSEDED
        return state
