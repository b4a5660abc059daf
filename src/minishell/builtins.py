"""Built-in commands for minishell.

Built-ins run inside the interpreter instead of spawning a program. ``prev``
and ``exit`` are not listed here: they are handled by the shell loop before a
line ever reaches the evaluator.
"""

import logging
import os
from collections.abc import Callable

from minishell.config import HELP_TEXT, truncate_line
from minishell.executor import report
from minishell.parser import BuiltinCall

logger = logging.getLogger(__name__)


class BuiltinCommands:
    """Built-in command table bound to a shell.

    The shell is used by ``source``, which hands every script line back to the
    shell's line dispatcher.
    """

    def __init__(self, shell):
        self._shell = shell
        self._commands: dict[str, Callable[[list[str]], None]] = {
            "cd": self.cmd_cd,
            "source": self.cmd_source,
            "help": self.cmd_help,
        }

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self._commands)

    def run(self, call: BuiltinCall) -> None:
        """Run a parsed built-in call."""
        logger.debug(f"Running built-in {call.name} with args {call.args}")
        self._commands[call.name](call.args)

    def cmd_cd(self, args: list[str]) -> None:
        """Change the interpreter's working directory."""
        if not args:
            return
        path = args[0]
        try:
            os.chdir(path)
        except (OSError, ValueError) as e:
            logger.debug(f"chdir to {path} failed: {e}")
            report(f"cd: {path}: No such file or directory")

    def cmd_source(self, args: list[str]) -> None:
        """Run every line of a script as if it had been typed at the prompt."""
        if not args:
            return
        path = args[0]
        try:
            script = open(path, errors="replace")
        except (OSError, ValueError) as e:
            logger.debug(f"Cannot open script {path}: {e}")
            report(f"source: {path}: No such file")
            return

        with script:
            for raw_line in script:
                line = truncate_line(raw_line.rstrip("\n"))
                if line:
                    self._shell.execute(line)

    def cmd_help(self, args: list[str]) -> None:
        """List the built-in commands."""
        print(HELP_TEXT)
