from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)


def get_git_diff(path: str = ".", staged: bool = False, cwd: str | os.PathLike | None = None) -> str:
    """Return the output of ``git diff [--staged] <path>`` verbatim.

    The exit code is not interpreted: git prints nothing and exits 0 when
    there are no changes, so an empty string is a normal result. Raises
    OSError if git cannot be launched and UnicodeDecodeError if the diff is
    not valid UTF-8.
    """
    cmd = ["git", "diff"]
    if staged:
        cmd.append("--staged")
    cmd.append(path)

    result = subprocess.run(cmd, capture_output=True, cwd=cwd, check=False)
    if result.returncode != 0:
        logger.debug(
            "git diff exited with %d: %s",
            result.returncode,
            result.stderr.decode("utf-8", errors="replace").strip(),
        )
    return result.stdout.decode("utf-8")
