"""
Utility functions.

Shared helper functions used across kernpurge modules.
"""

import os
import shutil
import subprocess
from typing import Dict, List, Optional, Sequence, Tuple


def run_command(cmd: List[str], check: bool = True) -> Tuple[int, str, str]:
    """
    Run a command and capture output.

    Args:
        cmd: Command as list of arguments
        check: If True, raise exception on non-zero exit code

    Returns:
        Tuple[int, str, str]: (exit_code, stdout, stderr)

    Raises:
        subprocess.CalledProcessError: If check=True and command fails
        OSError: If the command cannot be executed
    """
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=check,
        )
        return result.returncode, result.stdout, result.stderr
    except subprocess.CalledProcessError as e:
        if check:
            raise
        return e.returncode, e.stdout or "", e.stderr or ""


def find_executable(candidates: Sequence[str]) -> Optional[str]:
    """
    Return the first of the given program names found on PATH.

    Args:
        candidates: Program names in order of preference

    Returns:
        Optional[str]: The matching program name, or None if none is installed
    """
    for name in candidates:
        if shutil.which(name):
            return name
    return None


def command_environment(overrides: Dict[str, str]) -> Dict[str, str]:
    """
    Build a child process environment without touching our own.

    Args:
        overrides: Variables to set on top of the current environment

    Returns:
        Dict[str, str]: A fresh environment mapping
    """
    env = dict(os.environ)
    env.update(overrides)
    return env
