"""Extract the analysis, final answer and confidence label from raw model text.

Models are asked to end with::

    **FINAL ANSWER:** <answer>
    Confidence: High|Medium|Low

Compliance is not guaranteed, so every field degrades to an empty string
instead of raising.
"""

import re

from answer_consensus.models import ParsedAnswer

# Optional bold markup on either side of the marker; leftover markup never
# counts as the answer. The answer stops at the first blank line, the
# Confidence label, or the end of the text.
_FINAL_ANSWER_RE = re.compile(
    r"\**[ \t]*FINAL ANSWER:[ \t]*\**\s*(?!\*)(.+?)(?=\n\n|\**Confidence:|\Z)",
    re.IGNORECASE | re.DOTALL,
)

_CONFIDENCE_RE = re.compile(r"Confidence:\**[ \t]*(.+?)(?=\n|\Z)", re.IGNORECASE)


def parse_response(raw: str) -> ParsedAnswer:
    """Split a raw response into a ParsedAnswer. Never raises."""
    if not raw:
        return ParsedAnswer(analysis="", answer="", confidence="", full_text="")

    final_match = _FINAL_ANSWER_RE.search(raw)
    if final_match:
        analysis = raw[: final_match.start()]
        answer = final_match.group(1).strip()
    else:
        analysis = raw
        answer = ""

    confidence_match = _CONFIDENCE_RE.search(raw)
    confidence = confidence_match.group(1).strip() if confidence_match else ""

    return ParsedAnswer(
        analysis=analysis.strip(),
        answer=answer,
        confidence=confidence,
        full_text=raw,
    )
