"""Base reviewer implementing the Template Method pattern.

Every provider shares the same review algorithm:
    review() → build_prompt() → _call_api() → _parse()

Subclasses implement two things only:
  - _call_api: send the prompt once and return the raw response body
  - _parse: turn that body into the review text

Prompt construction lives here so that any provider sends the same prompt.
There is deliberately no retry wrapper: a failed call fails the run.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from revlens_core.utils.context import build_prompt


class BaseReviewer(ABC):
    def review(self, diff: str, codebase: dict[str, str], max_files: int) -> str:
        """Review ``diff`` with up to ``max_files`` snapshot files as context."""
        prompt = build_prompt(diff, codebase, max_files)
        raw = self._call_api(prompt)
        return self._parse(raw)

    @abstractmethod
    def _call_api(self, prompt: str) -> str:
        """Make a single API call and return the raw text response.

        Should raise on transport failure; nothing above this catches it.
        """

    @abstractmethod
    def _parse(self, raw: str) -> str:
        """Extract the review text from a raw response body."""

    def close(self) -> None:
        """Release any client resources. Default is a no-op."""
