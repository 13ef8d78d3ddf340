"""Majority/plurality vote over normalized final answers."""

import logging
import math
from collections.abc import Sequence

from answer_consensus.models import Attempt, ConsensusResult

logger = logging.getLogger(__name__)

# Long enough to separate different answers, short enough to ignore trailing verbosity.
ANSWER_PREFIX_LEN = 100


def normalize_answer(answer: str, prefix_len: int = ANSWER_PREFIX_LEN) -> str:
    """Grouping key for an answer: trimmed, lower-cased, truncated."""
    return answer.strip().lower()[:prefix_len]


def consensus_threshold(total_attempts: int) -> int:
    """Minimum group size that counts as consensus: half the attempts, rounded up."""
    return math.ceil(total_attempts / 2)


def group_attempts(
    attempts: Sequence[Attempt],
    prefix_len: int = ANSWER_PREFIX_LEN,
) -> dict[str, list[Attempt]]:
    """Group attempts by normalized answer, preserving first-seen order.

    Attempts with no parsed answer share the empty key like any other answer.
    """
    groups: dict[str, list[Attempt]] = {}
    for attempt in attempts:
        key = normalize_answer(attempt.parsed.answer, prefix_len)
        groups.setdefault(key, []).append(attempt)
    return groups


def aggregate(
    attempts: Sequence[Attempt],
    prefix_len: int = ANSWER_PREFIX_LEN,
) -> ConsensusResult | None:
    """Pick the largest answer group.

    Ties go to the group encountered first in the scan. Groups are built in
    attempt order, so that is the group whose earliest attempt came first.

    Returns:
        ConsensusResult, or None when there are no attempts.
    """
    if not attempts:
        return None

    best_group: list[Attempt] = []
    for group in group_attempts(attempts, prefix_len).values():
        if len(group) > len(best_group):
            best_group = group

    total = len(attempts)
    agreement = len(best_group)
    result = ConsensusResult(
        representative=best_group[0],
        agreement_count=agreement,
        total_attempts=total,
        is_consensus=agreement >= consensus_threshold(total),
    )
    logger.debug(
        "Consensus: %d/%d agree on attempt %d (consensus=%s)",
        agreement,
        total,
        result.representative.attempt_index,
        result.is_consensus,
    )
    return result
