"""Pipeline evaluation for minishell.

This module runs parsed command lines:
- Sequence segments run strictly one after another
- Pipeline stages run concurrently, joined by OS pipes
- Redirections are opened by the interpreter and handed to the child
- External programs are located through the executable search path

The interpreter's own standard descriptors are never rebound; each child gets
its stdio at creation time.
"""

import errno
import logging
import os
import subprocess
import sys
from collections.abc import Callable
from dataclasses import dataclass

from minishell.config import OUTPUT_FILE_MODE
from minishell.parser import (
    BUILTIN_NAMES,
    INPUT_REDIRECT,
    BuiltinCall,
    Command,
    Pipeline,
    Redirect,
    parse_line,
)
from minishell.tokenizer import Token

# Configure module logger
logger = logging.getLogger(__name__)

# Errors meaning "this program cannot be run", as opposed to "no process can be created".
# ValueError is an embedded NUL in argv.
NOT_FOUND_ERRORS = (FileNotFoundError, PermissionError, NotADirectoryError, IsADirectoryError, ValueError)


class RedirectError(Exception):
    """Exception raised when a redirection cannot be established.

    This covers a redirect operator with no file name after it and a target
    file that cannot be opened. It is contained to the stage it belongs to.
    """

    pass


class SpawnError(Exception):
    """Exception raised when a process or pipe cannot be created at all.

    This signals that the host cannot support further execution and is fatal
    to the interpreter.
    """

    pass


def report(message: str) -> None:
    """Print a user-facing diagnostic on stderr."""
    print(message, file=sys.stderr, flush=True)


def flush_stdio() -> None:
    """Flush Python-level buffers so children never overtake earlier output."""
    sys.stdout.flush()
    sys.stderr.flush()


@dataclass
class ForkedContext:
    """Handle for a forked interpreter context running a built-in."""

    pid: int

    def wait(self) -> int:
        _, status = os.waitpid(self.pid, 0)
        return os.waitstatus_to_exitcode(status)


def open_redirect(redirect: Redirect) -> int:
    """Open the file behind a redirection.

    Args:
        redirect: The redirection to establish

    Returns:
        A new file descriptor owned by the caller

    Raises:
        RedirectError: If the target is missing or cannot be opened
    """
    if redirect.target is None:
        raise RedirectError("No redirect file specified")

    direction = "input" if redirect.op == INPUT_REDIRECT else "output"
    try:
        if redirect.op == INPUT_REDIRECT:
            return os.open(redirect.target, os.O_RDONLY)
        return os.open(redirect.target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, OUTPUT_FILE_MODE)
    except OSError as e:
        raise RedirectError(f"Error opening {direction} file: {redirect.target}: {e.strerror}") from e
    except ValueError as e:
        # Embedded NUL in the target name
        raise RedirectError(f"Error opening {direction} file: {redirect.target}: {e}") from e


def resolve_redirects(
    redirects: list[Redirect], stdin: int | None = None, stdout: int | None = None
) -> tuple[int | None, int | None, list[int]]:
    """Apply redirections left to right on top of inherited stdio.

    A later redirection of the same direction replaces an earlier one; the
    earlier file has still been opened (and, for ">", created or truncated).

    Args:
        redirects: Redirections in input order
        stdin: Inherited stdin descriptor (None means the interpreter's own)
        stdout: Inherited stdout descriptor (None means the interpreter's own)

    Returns:
        Tuple of (stdin, stdout, opened) where opened lists descriptors the
        caller must close once the child has been started

    Raises:
        RedirectError: If any redirection fails; nothing stays open
    """
    opened: list[int] = []
    try:
        for redirect in redirects:
            fd = open_redirect(redirect)
            opened.append(fd)
            if redirect.op == INPUT_REDIRECT:
                stdin = fd
            else:
                stdout = fd
    except RedirectError:
        close_all(opened)
        raise
    return stdin, stdout, opened


def close_all(fds: list[int | None]) -> None:
    """Close every descriptor in a list, skipping None."""
    for fd in fds:
        if fd is not None:
            os.close(fd)


def spawn(argv: list[str], stdin: int | None = None, stdout: int | None = None) -> subprocess.Popen | None:
    """Start an external program.

    Args:
        argv: Program name followed by its arguments
        stdin: Descriptor for the child's stdin, or None to inherit
        stdout: Descriptor for the child's stdout, or None to inherit

    Returns:
        The process handle, or None when the program could not be found

    Raises:
        SpawnError: If process creation itself failed
    """
    flush_stdio()
    try:
        logger.debug(f"Spawning: {argv}")
        return subprocess.Popen(argv, stdin=stdin, stdout=stdout)
    except NOT_FOUND_ERRORS as e:
        logger.debug(f"Cannot run {argv[0]}: {e}")
    except OSError as e:
        if e.errno != errno.ENOEXEC:
            logger.debug(f"Process creation failed for {argv[0]}: {e}")
            raise SpawnError(str(e)) from e
        logger.debug(f"Cannot run {argv[0]}: {e}")

    report(f"{argv[0]}: command not found")
    return None


def make_pipe() -> tuple[int, int]:
    """Create an OS pipe as (read_fd, write_fd).

    Raises:
        SpawnError: If the pipe cannot be created
    """
    try:
        return os.pipe()
    except OSError as e:
        logger.debug(f"Pipe creation failed: {e}")
        raise SpawnError(str(e)) from e


BuiltinRunner = Callable[[BuiltinCall], None]


class Evaluator:
    """Runs parsed command lines, one sequence segment at a time.

    Built-ins are delegated to ``run_builtin``. Only a built-in that makes up
    the final sequence segment runs inside the interpreter; one in an earlier
    segment or after a pipe runs in a forked context so its side effects stay
    there.
    """

    def __init__(self, run_builtin: BuiltinRunner, builtin_names: frozenset[str] = BUILTIN_NAMES):
        self._run_builtin = run_builtin
        self._builtin_names = builtin_names

    def evaluate(self, tokens: list[Token]) -> None:
        """Evaluate a full token sequence.

        Each pipeline, and every process it started, finishes before the next
        one begins. Exit statuses are not consulted.
        """
        for pipeline in parse_line(tokens, self._builtin_names):
            self.run_pipeline(pipeline)

    def run_pipeline(self, pipeline: Pipeline) -> None:
        """Run all stages of a pipeline concurrently and wait for every one.

        A lone built-in runs inside the interpreter, unless the pipeline is
        isolated (followed by ";"), in which case it runs in a forked context.
        """
        stages = pipeline.stages
        if len(stages) == 1 and isinstance(stages[0], BuiltinCall):
            if pipeline.isolated:
                self._fork_builtin(stages[0], None).wait()
            else:
                self._run_builtin(stages[0])
            return

        handles = []
        read_fd: int | None = None
        try:
            for index, stage in enumerate(stages):
                next_read_fd: int | None = None
                write_fd: int | None = None
                if index < len(stages) - 1:
                    next_read_fd, write_fd = make_pipe()
                try:
                    handle = self._start_stage(stage, read_fd, write_fd)
                finally:
                    # The child holds its own copies now
                    close_all([read_fd, write_fd])
                    read_fd = next_read_fd
                if handle is not None:
                    handles.append(handle)
        finally:
            close_all([read_fd])
            for handle in handles:
                handle.wait()
            logger.debug(f"Pipeline of {len(stages)} stage(s) finished")

    def _start_stage(self, stage, stdin: int | None, stdout: int | None):
        if isinstance(stage, BuiltinCall):
            return self._fork_builtin(stage, stdin)
        return self._start_command(stage, stdin, stdout)

    def _start_command(self, command: Command, stdin: int | None, stdout: int | None) -> subprocess.Popen | None:
        try:
            stdin, stdout, opened = resolve_redirects(command.redirects, stdin, stdout)
        except RedirectError as e:
            logger.debug(f"Redirect failed for {command.argv}: {e}")
            report(str(e))
            return None

        try:
            if not command.argv:
                return None
            return spawn(command.argv, stdin, stdout)
        finally:
            close_all(opened)

    def _fork_builtin(self, call: BuiltinCall, stdin: int | None) -> ForkedContext:
        flush_stdio()
        try:
            pid = os.fork()
        except OSError as e:
            logger.debug(f"Fork failed for built-in {call.name}: {e}")
            raise SpawnError(str(e)) from e

        if pid == 0:
            status = 0
            try:
                if stdin is not None:
                    os.dup2(stdin, 0)
                self._run_builtin(call)
            except Exception:
                logger.exception(f"Built-in {call.name} failed in forked context")
                status = 1
            finally:
                # The forked context must never fall back into the caller's loop
                try:
                    flush_stdio()
                finally:
                    os._exit(status)

        logger.debug(f"Forked context {pid} for built-in {call.name}")
        return ForkedContext(pid)
