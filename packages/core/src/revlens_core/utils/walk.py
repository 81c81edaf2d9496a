"""Local codebase snapshot used as review context.

The walk mirrors what a developer sees in their editor once ignored files
are hidden: hidden entries (dotfiles, ``.git``) are skipped and every
``.gitignore`` / ``.ignore`` along the way, including those above the scan root
up to the enclosing repository root, is honoured with gitignore
semantics. The repository's ``.git/info/exclude`` applies to the whole tree.

Files that cannot be read as UTF-8 text are skipped with a warning. A bad
file never fails the walk.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pathspec

logger = logging.getLogger(__name__)

_IGNORE_FILES = (".gitignore", ".ignore")
_REPO_EXCLUDE = Path(".git") / "info" / "exclude"


def _read_patterns(path: Path) -> list[str]:
    try:
        return path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read ignore file %s: %s", path, e)
        return []


def _load_ignore_spec(directory: Path, extra: tuple[Path, ...] = ()) -> pathspec.GitIgnoreSpec | None:
    """Compile the ignore rules declared directly in ``directory``.

    ``extra`` files are read first so that the directory's own ignore files
    can override them.
    """
    lines: list[str] = []
    for path in (*extra, *(directory / name for name in _IGNORE_FILES)):
        if path.is_file():
            lines.extend(_read_patterns(path))
    if not lines:
        return None
    return pathspec.GitIgnoreSpec.from_lines(lines)


def _is_ignored(rules: list[tuple[Path, pathspec.GitIgnoreSpec]], path: Path, is_dir: bool) -> bool:
    """Return True if the deepest rule set with an opinion on ``path`` excludes it.

    Rules are ordered shallow to deep. A deeper ``.gitignore`` can re-include
    (``!pattern``) what a shallower one excluded, and vice versa.
    """
    for base, spec in reversed(rules):
        relative = path.relative_to(base).as_posix()
        if is_dir:
            relative += "/"
        result = spec.check_file(relative)
        if result.include is not None:
            return result.include
    return False


def _find_repo_root(start: Path) -> Path | None:
    """Return the closest directory at or above ``start`` that holds ``.git``."""
    for directory in (start, *start.parents):
        if (directory / ".git").exists():
            return directory
    return None


def _rules_above(root: Path, repo_root: Path | None) -> tuple[list[tuple[Path, pathspec.GitIgnoreSpec]], bool]:
    """Collect the ignore rules of every directory from ``repo_root`` down to ``root``'s parent.

    Also reports whether ``root`` itself, or a directory between it and the
    repository root, is ignored by those rules.
    """
    rules: list[tuple[Path, pathspec.GitIgnoreSpec]] = []
    if repo_root is None or repo_root == root:
        return rules, False

    ancestors = [repo_root, *(p for p in reversed(root.parents) if repo_root in p.parents)]
    for directory in ancestors:
        if directory != repo_root and _is_ignored(rules, directory, is_dir=True):
            return rules, True
        extra = (directory / _REPO_EXCLUDE,) if directory == repo_root else ()
        spec = _load_ignore_spec(directory, extra=extra)
        if spec is not None:
            rules.append((directory, spec))
    return rules, _is_ignored(rules, root, is_dir=True)


def snapshot_codebase(root: str | os.PathLike = ".") -> dict[str, str]:
    """Return every readable, non-ignored file under ``root`` keyed by its relative path.

    When ``root`` sits inside a git repository, the ignore files between the
    repository root and ``root`` apply as well, so scanning a subdirectory
    hides the same files as scanning the whole repository.

    Keys use forward slashes regardless of platform. The mapping has no
    meaningful order: it follows the filesystem's directory listing, so which
    files end up in a bounded prompt sample can differ between machines.
    """
    root_path = Path(os.path.abspath(root))
    codebase: dict[str, str] = {}

    repo_root = _find_repo_root(root_path)
    inherited, root_ignored = _rules_above(root_path, repo_root)
    if root_ignored:
        logger.warning("%s is excluded by an ignore file", root)
        logger.warning("No readable files found in the codebase")
        return codebase

    # Rule sets active for each directory visited so far, shallow to deep.
    active: dict[Path, list[tuple[Path, pathspec.GitIgnoreSpec]]] = {}

    def _on_error(error: OSError) -> None:
        logger.warning("Error accessing path: %s", error)

    for dirpath, dirnames, filenames in os.walk(root_path, onerror=_on_error):
        current = Path(dirpath)
        if current == root_path:
            parent_rules = inherited
        else:
            parent_rules = active.get(current.parent, [])
        extra = (current / _REPO_EXCLUDE,) if current == repo_root else ()
        spec = _load_ignore_spec(current, extra=extra)

        rules = parent_rules + [(current, spec)] if spec is not None else parent_rules
        active[current] = rules

        # Pruning in place stops os.walk from descending into these directories.
        dirnames[:] = [
            name
            for name in dirnames
            if not name.startswith(".") and not _is_ignored(rules, current / name, is_dir=True)
        ]

        for name in filenames:
            if name.startswith("."):
                continue
            path = current / name
            if _is_ignored(rules, path, is_dir=False):
                continue
            if not path.is_file():
                continue
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Could not read file %s: %s", path, e)
                continue
            codebase[path.relative_to(root_path).as_posix()] = content

    if not codebase:
        logger.warning("No readable files found in the codebase")

    return codebase
