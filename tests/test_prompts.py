"""Tests for answer_consensus/prompts.py."""

from answer_consensus.attachments import Attachment
from answer_consensus.models import AttemptConfig
from answer_consensus.prompts import build_attachment_block, build_prompt


def test_first_attempt_has_no_verification(sample_question, sample_prompts_config):
    prompt = build_prompt(sample_question, AttemptConfig(1, 3), sample_prompts_config)
    assert prompt.startswith(sample_prompts_config.system)
    assert f"QUESTION:\n{sample_question.text}" in prompt
    assert sample_prompts_config.verification not in prompt


def test_later_attempts_append_verification(sample_question, sample_prompts_config):
    prompt = build_prompt(sample_question, AttemptConfig(2, 3), sample_prompts_config)
    assert prompt.endswith(sample_prompts_config.verification)


def test_prompt_is_deterministic(sample_question, sample_prompts_config):
    a = build_prompt(sample_question, AttemptConfig(3, 3), sample_prompts_config)
    b = build_prompt(sample_question, AttemptConfig(3, 3), sample_prompts_config)
    assert a == b


def test_question_text_kept_literally(sample_prompts_config):
    from answer_consensus.models import Question

    q = Question(text="What does `ls -la {}` print?\n  (two lines)", source="cli")
    prompt = build_prompt(q, AttemptConfig(1, 1), sample_prompts_config)
    assert q.text in prompt


def test_attachments_come_before_question(sample_question, sample_prompts_config):
    attachments = [Attachment("data.csv", "text/csv", "a,b\n1,2")]
    prompt = build_prompt(sample_question, AttemptConfig(1, 1), sample_prompts_config, attachments)
    assert "--- data.csv (text/csv) ---\na,b\n1,2" in prompt
    assert prompt.index("ATTACHED FILES:") < prompt.index("QUESTION:")


def test_attachment_block_empty_without_files():
    assert build_attachment_block([]) == ""
