"""minishell: a line-oriented command interpreter with sequencing, pipes and redirection."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("minishell")
except PackageNotFoundError:
    pass
