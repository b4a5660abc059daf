"""Configuration for pytest."""

import os
import subprocess
import sys
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).resolve().parent.parent / "src"


@pytest.fixture(autouse=True)
def restore_cwd():
    """Undo any chdir performed by the code under test."""
    cwd = os.getcwd()
    yield
    os.chdir(cwd)


@pytest.fixture
def run_minishell(tmp_path):
    """Run ``python -m minishell`` in a subprocess, feeding it ``script`` on stdin.

    The prompt is blanked through MINISHELL_PROMPT so stdout holds only
    command output and the interpreter's own messages.
    """

    def _run(script: str, cwd: Path | None = None, **env_overrides: str) -> subprocess.CompletedProcess[str]:
        env = os.environ.copy()
        env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
        env["MINISHELL_PROMPT"] = ""
        env.update(env_overrides)
        return subprocess.run(
            [sys.executable, "-m", "minishell"],
            input=script,
            capture_output=True,
            text=True,
            cwd=cwd or tmp_path,
            env=env,
            timeout=30,
            check=False,
        )

    return _run
