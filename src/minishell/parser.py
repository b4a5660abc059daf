"""Command parsing utilities for minishell.

This module turns a token sequence into an operator-precedence structure:
- Sequence separation on ";"
- Pipe splitting on "|", with built-in detection at the start of every stage
- Redirection extraction for "<" and ">"

Only unquoted tokens act as operators.
"""

import logging
from dataclasses import dataclass, field

from minishell.tokenizer import Token

logger = logging.getLogger(__name__)

SEQUENCE_OP = ";"
PIPE_OP = "|"
INPUT_REDIRECT = "<"
OUTPUT_REDIRECT = ">"
REDIRECT_OPS = (INPUT_REDIRECT, OUTPUT_REDIRECT)

BUILTIN_NAMES = frozenset({"cd", "source", "help"})


@dataclass(frozen=True)
class Redirect:
    """A single redirection; ``target`` is None when no file name followed the operator."""

    op: str
    target: str | None


@dataclass
class Command:
    """An external program invocation with its redirections in input order."""

    argv: list[str] = field(default_factory=list)
    redirects: list[Redirect] = field(default_factory=list)


@dataclass
class BuiltinCall:
    """A built-in invocation; ``args`` holds every token text after the name."""

    name: str
    args: list[str] = field(default_factory=list)


Stage = Command | BuiltinCall


@dataclass
class Pipeline:
    """Stages connected stdout-to-stdin, all running concurrently.

    ``isolated`` is set when a ";" follows the pipeline; a lone built-in in
    such a pipeline must not touch the interpreter's own state.
    """

    stages: list[Stage] = field(default_factory=list)
    isolated: bool = False


def find_operator(tokens: list[Token], op: str, start: int = 0) -> int | None:
    """Find the first unquoted ``op`` at or after ``start``.

    Returns:
        The token index, or None if the operator does not occur
    """
    for index in range(start, len(tokens)):
        if tokens[index].is_operator(op):
            return index
    return None


def split_tokens(tokens: list[Token], op: str) -> list[list[Token]]:
    """Split a token range on every unquoted ``op``.

    Args:
        tokens: The token range to split
        op: Operator spelling to split on

    Returns:
        List of sub-ranges; empty sub-ranges are kept
    """
    parts: list[list[Token]] = []
    start = 0
    index = find_operator(tokens, op)
    while index is not None:
        parts.append(tokens[start:index])
        start = index + 1
        index = find_operator(tokens, op, start)
    parts.append(tokens[start:])
    return parts


def is_builtin(token: Token, builtin_names: frozenset[str] = BUILTIN_NAMES) -> bool:
    """Check if a token names a built-in; quoted names never do."""
    return not token.quoted and token.text in builtin_names


def parse_command(tokens: list[Token]) -> Command:
    """Extract redirections from a stage, leaving the remaining words as argv.

    Each "<" or ">" consumes the token after it, whatever that token is, as its
    target. Words following a target stay arguments of the command.
    """
    command = Command()
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if not token.quoted and token.text in REDIRECT_OPS:
            if index + 1 < len(tokens):
                command.redirects.append(Redirect(token.text, tokens[index + 1].text))
                index += 2
                continue
            command.redirects.append(Redirect(token.text, None))
        else:
            command.argv.append(token.text)
        index += 1
    return command


def parse_pipeline(tokens: list[Token], builtin_names: frozenset[str] = BUILTIN_NAMES) -> Pipeline:
    """Split one sequence segment into pipeline stages.

    Built-ins are checked before pipe splitting at the start of every stage: a
    built-in swallows the whole rest of the range, pipes and redirections
    included.
    """
    pipeline = Pipeline()
    start = 0
    while True:
        if start < len(tokens) and is_builtin(tokens[start], builtin_names):
            pipeline.stages.append(
                BuiltinCall(tokens[start].text, [token.text for token in tokens[start + 1 :]])
            )
            break

        index = find_operator(tokens, PIPE_OP, start)
        if index is None:
            pipeline.stages.append(parse_command(tokens[start:]))
            break

        pipeline.stages.append(parse_command(tokens[start:index]))
        start = index + 1

    return pipeline


def parse_line(tokens: list[Token], builtin_names: frozenset[str] = BUILTIN_NAMES) -> list[Pipeline]:
    """Parse a full token sequence into pipelines to run in order.

    Empty sequence segments (such as a trailing ";") are dropped. Every
    segment that a ";" follows is marked isolated.
    """
    segments = split_tokens(tokens, SEQUENCE_OP)
    pipelines = []
    for index, segment in enumerate(segments):
        if not segment:
            continue
        pipeline = parse_pipeline(segment, builtin_names)
        pipeline.isolated = index < len(segments) - 1
        pipelines.append(pipeline)
    logger.debug(f"Parsed {len(tokens)} tokens into {len(pipelines)} pipeline(s)")
    return pipelines
