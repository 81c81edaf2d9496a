"""Prompt assembly for a local-changes review.

The prompt has three parts, always in this order:
  1. the reviewer framing and the diff in a ```diff fence
  2. up to ``max_files`` files from the codebase snapshot, each fenced
  3. the fixed five-point review checklist

Files are taken in the snapshot's iteration order. Their content is
embedded whole, so a very large file makes a very large prompt.
"""

from __future__ import annotations

from itertools import islice

REVIEW_CHECKLIST = (
    "\nPlease provide a detailed code review focusing on:\n"
    "1. Potential bugs or issues\n"
    "2. Code style and best practices\n"
    "3. Performance implications\n"
    "4. Security considerations\n"
    "5. Suggestions for improvement"
)


def build_context_section(codebase: dict[str, str], max_files: int) -> str:
    """Render at most ``max_files`` snapshot entries as fenced file blocks."""
    header = "Relevant files from the codebase for context:\n\n"
    blocks = "".join(f"{path}:\n```\n{content}\n```\n\n" for path, content in islice(codebase.items(), max_files))
    return header + blocks


def build_prompt(diff: str, codebase: dict[str, str], max_files: int) -> str:
    return (
        f"As a code reviewer, analyze the following changes:\n\n```diff\n{diff}\n```\n\n"
        + build_context_section(codebase, max_files)
        + REVIEW_CHECKLIST
    )
