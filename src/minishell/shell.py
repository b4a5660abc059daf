"""Interactive shell for minishell.

This module defines the read loop and the line dispatcher that sit on top of
the tokenizer and the evaluator. The dispatcher owns the session state used by
the ``prev`` built-in.
"""

import logging
from dataclasses import dataclass

from minishell import config
from minishell.builtins import BuiltinCommands
from minishell.executor import Evaluator
from minishell.tokenizer import tokenize

logger = logging.getLogger(__name__)

PREV_COMMAND = "prev"
EXIT_COMMAND = "exit"


@dataclass
class Session:
    """State carried from one input line to the next."""

    # Line re-run by "prev"; None until a command has been run
    previous: str | None = None


class Shell:
    """Line-oriented command interpreter.

    Example:
        >>> shell = Shell()
        >>> shell.execute('echo "a;b" | cat ; ls > listing.txt')
    """

    def __init__(self, session: Session | None = None):
        self.session = session or Session()
        self.builtins = BuiltinCommands(self)
        self.evaluator = Evaluator(self.builtins.run, self.builtins.names)

    def read_line(self) -> str | None:
        """Prompt for and read one line.

        Returns:
            The line without its newline, cut to the input capacity, or None
            at end of input
        """
        try:
            line = input(config.PROMPT)
        except EOFError:
            return None
        return config.truncate_line(line)

    def execute(self, line: str) -> None:
        """Dispatch one line: handle ``prev``, remember the line, evaluate it.

        Lines without tokens are ignored and do not replace the previous line.
        """
        tokens, count = tokenize(line)
        if count == 0:
            return

        if tokens[0].is_operator(PREV_COMMAND):
            if self.session.previous is None:
                print(config.NO_PREVIOUS_MESSAGE)
                return
            line = self.session.previous
            print(line)
            tokens, count = tokenize(line)

        # Set before evaluating so that "source" can leave its last line here
        self.session.previous = line
        logger.debug(f"Evaluating line: {line}")
        self.evaluator.evaluate(tokens)

    def run(self) -> None:
        """Run the read loop until "exit" or end of input."""
        print(config.WELCOME_MESSAGE)
        while True:
            line = self.read_line()
            if line is None:
                print()
                print(config.FAREWELL_MESSAGE)
                break

            if line == EXIT_COMMAND:
                print(config.FAREWELL_MESSAGE)
                break

            if not line:
                continue

            self.execute(line)
