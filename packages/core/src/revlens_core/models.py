"""Wire models for the ``/api/generate`` endpoint."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class ReviewRequest:
    """JSON body POSTed to ``/api/generate``."""

    model: str
    prompt: str
    stream: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ReviewFragment:
    """One line of the endpoint's newline-delimited response.

    Both fields are optional on the wire; missing ones take the defaults
    below. A present field of the wrong type makes the whole line undecodable.
    """

    response: str = ""
    done: bool = False

    @classmethod
    def from_line(cls, line: str) -> ReviewFragment | None:
        """Decode one response line, or return None if it is not a fragment."""
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict):
            return None

        response = data.get("response", "")
        done = data.get("done", False)
        if not isinstance(response, str) or not isinstance(done, bool):
            return None
        return cls(response=response, done=done)
