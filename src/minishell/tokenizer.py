"""Lexical analysis for minishell input lines.

This module splits one input line into tokens:
- Runs of spaces separate words (tab is an operator character, not whitespace)
- Double quotes produce a single literal token
- Special characters become one-character operator tokens
"""

import sys
from dataclasses import dataclass

QUOTE_CHAR = '"'
SPECIAL_CHARS = frozenset("()<>;|\t")


@dataclass(frozen=True)
class Token:
    """A lexical unit of an input line.

    ``quoted`` marks text that came from inside a quoted span; such a token is
    always a literal argument, even when it spells an operator.
    """

    text: str
    quoted: bool = False

    def is_operator(self, op: str) -> bool:
        """Check whether this token is the unquoted operator ``op``."""
        return not self.quoted and self.text == op


def is_special(ch: str) -> bool:
    """Check if a character is one of ( ) < > ; | or tab."""
    return ch in SPECIAL_CHARS


def tokenize(line: str) -> tuple[list[Token], int]:
    """Split a line into tokens.

    Args:
        line: A single input line; one trailing newline is ignored

    Returns:
        Tuple of (tokens, count), tokens in input order
    """
    if line.endswith("\n"):
        line = line[:-1]

    tokens: list[Token] = []
    i = 0
    length = len(line)

    while i < length:
        ch = line[i]

        if ch == " ":
            i += 1

        elif ch == QUOTE_CHAR:
            # An unterminated quote runs to the end of the line
            end = line.find(QUOTE_CHAR, i + 1)
            if end == -1:
                end = length
            tokens.append(Token(line[i + 1 : end], quoted=True))
            i = end + 1

        elif is_special(ch):
            tokens.append(Token(ch))
            i += 1

        else:
            start = i
            while i < length and line[i] != " " and not is_special(line[i]):
                i += 1
            tokens.append(Token(line[start:i]))

    return tokens, len(tokens)


def format_tokens(tokens: list[Token]) -> str:
    """Render tokens one per line."""
    return "\n".join(token.text for token in tokens)


def main():
    """Entry point for the minishell-tokenize tool.

    Reads a single line from stdin and prints its tokens, one per line.
    """
    tokens, count = tokenize(sys.stdin.readline())
    if count:
        print(format_tokens(tokens))


if __name__ == "__main__":
    main()
