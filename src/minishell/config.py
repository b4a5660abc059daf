"""Configuration settings for minishell.

This module contains configuration settings for the interpreter.

Environment variables:
- MINISHELL_PROMPT: Prompt printed before each input line (default: "shell $ ")
- MINISHELL_MAX_LINE: Input line capacity in characters, terminator included (default: 255)
- MINISHELL_LOG_LEVEL: Level of the diagnostic log written to stderr (default: "WARNING")
"""

import os

PROMPT = os.environ.get("MINISHELL_PROMPT", "shell $ ")
MAX_LINE_CHARS = int(os.environ.get("MINISHELL_MAX_LINE", "255"))
LOG_LEVEL = os.environ.get("MINISHELL_LOG_LEVEL", "WARNING").upper()

# Permissions for files created by ">" (rw-r--r--, before umask)
OUTPUT_FILE_MODE = 0o644

WELCOME_MESSAGE = "Welcome to mini-shell"
FAREWELL_MESSAGE = "Bye bye."
NO_PREVIOUS_MESSAGE = 'No previous commands run, please run a command before running "prev"'

HELP_TEXT = """Available built-in commands:
exit - exit the shell
cd [directory] - change the working directory
source [file] - execute the specified script
prev - print and execute the previous command line
help - lists internally defined shell commands"""


def truncate_line(line: str) -> str:
    """Cut a line down to the fixed input capacity.

    One slot of MAX_LINE_CHARS is reserved for the terminator, so at most
    MAX_LINE_CHARS - 1 characters survive.
    """
    return line[: max(MAX_LINE_CHARS - 1, 0)]
