"""Summarizer — builds the synthesis prompt that merges provider answers."""

from __future__ import annotations

from dataclasses import dataclass

RESPONSE_DELIMITER = "\n\n---\n\n"

SUMMARY_PROMPT = """\
You are summarizing AI responses for comparison. The user asked: "{prompt}"

Here are the responses from different AI models:

{responses}

Provide a brief synthesis (3-5 sentences) highlighting:
1. Key points where the AIs agree
2. Notable differences in their recommendations
3. Any unique insights from specific models

Be concise and actionable. Don't list each AI separately - synthesize the information.\
"""


@dataclass(frozen=True)
class SummaryEntry:
    """One succeeded provider's answer as fed to the summarizer."""

    display_name: str
    model_name: str
    text: str


def format_entry(entry: SummaryEntry) -> str:
    return f"### {entry.display_name} ({entry.model_name}):\n{entry.text}"


def build_summary_prompt(prompt: str, entries: list[SummaryEntry]) -> str:
    """Wrap every answer, in the order given, into the synthesis instruction."""
    if len(entries) < 2:
        raise ValueError("A summary needs at least two responses")
    responses = RESPONSE_DELIMITER.join(format_entry(e) for e in entries)
    return SUMMARY_PROMPT.format(prompt=prompt, responses=responses)
