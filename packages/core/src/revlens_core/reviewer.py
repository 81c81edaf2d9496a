"""Core local-changes review orchestration."""

from __future__ import annotations

import logging

from revlens_core.config import Settings
from revlens_core.providers.base import BaseReviewer
from revlens_core.providers.ollama import OllamaReviewer
from revlens_core.utils.walk import snapshot_codebase
from revlens_core.vcs.diff import get_git_diff

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILES = 5


def _get_reviewer(settings: Settings, timeout: float | None = None) -> BaseReviewer:
    return OllamaReviewer(ollama_url=settings.ollama_url, model=settings.model, timeout=timeout)


def run_review(
    settings: Settings,
    path: str = ".",
    staged: bool = False,
    max_files: int = DEFAULT_MAX_FILES,
    reviewer: BaseReviewer | None = None,
    timeout: float | None = None,
) -> str:
    """Run the review pipeline for ``path`` and return the review text.

    Steps run strictly one after another: snapshot the codebase, read the
    diff, send one review request. Any failure propagates to the caller.
    A reviewer built here is closed before returning; a caller-supplied one
    is left open.
    """
    owns_reviewer = reviewer is None
    if reviewer is None:
        reviewer = _get_reviewer(settings, timeout=timeout)

    try:
        codebase = snapshot_codebase(path)
        logger.info("Collected %d file(s) under %s", len(codebase), path)

        diff = get_git_diff(path, staged=staged)
        if not diff:
            logger.info("git diff reported no %schanges for %s", "staged " if staged else "", path)

        return reviewer.review(diff, codebase, max_files)
    finally:
        if owns_reviewer:
            reviewer.close()
