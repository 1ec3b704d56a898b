"""Batch file parsing.

A batch file lists one command per line::

    # Compare compressors on the same input.
    -q gzip -c big.tar
    -q bzip2 -c big.tar
    -i "cat big.tar" -o "wc -c" xz \\
        -c -

Rules:
- Blank lines and lines whose first non-blank character is ``#`` are
  skipped.
- Arguments are separated by spaces or tabs.  ``'...'`` and ``"..."``
  quote an argument; inside or outside quotes a backslash escapes the
  next character (``\\n``, ``\\r``, ``\\t`` and ``\\0`` are translated).
- A backslash at the end of a line continues the command on the next one.
- Leading ``-I``, ``-i``, ``-o`` and ``-r`` options take one argument;
  ``-q`` quiets standard output, a second ``-q`` standard error too.  The
  first argument that is not an option starts the command itself.

This is deliberately simpler than any real shell: no variables, globs or
redirections.
"""

from __future__ import annotations

from pathlib import Path

from runstat.bench.config import Command
from runstat.logging import get_logger

log = get_logger("batch")

_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "0": "\0"}
_BLANKS = (" ", "\t")
_NEWLINES = ("\r", "\n")
_QUOTES = ("'", '"')
_ARG_OPTIONS = {"-I": "replace_str", "-i": "input_cmd", "-o": "output_cmd", "-r": "pre_cmd"}


class BatchSyntaxError(ValueError):
    """A malformed batch file."""

    def __init__(self, message: str, lineno: int) -> None:
        super().__init__(f"line {lineno}: {message}")
        self.lineno = lineno


class _Scanner:
    """Splits batch text into logical lines of unquoted arguments."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.lineno = 1

    def _peek(self, offset: int = 0) -> str:
        i = self.pos + offset
        return self.text[i] if i < len(self.text) else ""

    def _at_continuation(self) -> bool:
        return self._peek() == "\\" and self._peek(1) in _NEWLINES

    def _skip_newline(self) -> None:
        if self._peek() == "\r" and self._peek(1) == "\n":
            self.pos += 1
        if self._peek() in _NEWLINES:
            self.pos += 1
            self.lineno += 1

    def _skip_to_eol(self) -> None:
        while self._peek() and self._peek() not in _NEWLINES:
            self.pos += 1

    def lines(self) -> list[tuple[int, list[str]]]:
        """Return ``(line number, arguments)`` for every non-empty logical line."""
        result: list[tuple[int, list[str]]] = []
        while self.pos < len(self.text):
            start_line = self.lineno
            args = self._logical_line()
            if args:
                result.append((start_line, args))
        return result

    def _logical_line(self) -> list[str]:
        args: list[str] = []
        while True:
            ch = self._peek()
            if ch == "":
                return args
            if ch in _BLANKS:
                self.pos += 1
            elif ch in _NEWLINES:
                self._skip_newline()
                return args
            elif self._at_continuation():
                self.pos += 1
                self._skip_newline()
            elif ch == "#" and not args:
                self._skip_to_eol()
            else:
                args.append(self._argument())

    def _argument(self) -> str:
        quote = self._peek() if self._peek() in _QUOTES else ""
        if quote:
            self.pos += 1
        chars: list[str] = []
        while True:
            ch = self._peek()
            if ch == "":
                if quote:
                    raise BatchSyntaxError("Unterminated string.", self.lineno)
                break
            if quote and ch == quote:
                self.pos += 1
                break
            if ch in _NEWLINES:
                if quote:
                    raise BatchSyntaxError("Unterminated string.", self.lineno)
                break
            if not quote and ch in _BLANKS:
                break
            if ch == "\\":
                nxt = self._peek(1)
                if nxt == "":
                    raise BatchSyntaxError("Escape character not specified.", self.lineno)
                if nxt in _NEWLINES:
                    if quote:
                        raise BatchSyntaxError(
                            "'\\' is ambiguous before a newline inside a string.", self.lineno
                        )
                    # Line continuation ends the argument.
                    break
                chars.append(_ESCAPES.get(nxt, nxt))
                self.pos += 2
                continue
            chars.append(ch)
            self.pos += 1
        return "".join(chars)


def _command_from_args(args: list[str], lineno: int) -> Command:
    options: dict[str, object] = {}
    quiet = 0
    i = 0
    while i < len(args):
        arg = args[i]
        if arg in _ARG_OPTIONS:
            if i + 1 == len(args):
                raise BatchSyntaxError(f"option requires an argument -- {arg[1]}", lineno)
            options[_ARG_OPTIONS[arg]] = args[i + 1]
            i += 2
        elif arg in ("-q", "-qq"):
            quiet += len(arg) - 1
            i += 1
        elif arg.startswith("-"):
            if arg == "-":
                raise BatchSyntaxError("option name not given", lineno)
            raise BatchSyntaxError(f"unknown option -- {arg[1]}", lineno)
        else:
            break

    argv = tuple(args[i:])
    if not argv:
        raise BatchSyntaxError("Missing command.", lineno)

    return Command(
        argv=argv,
        quiet_stdout=quiet >= 1,
        quiet_stderr=quiet >= 2,
        **options,  # type: ignore[arg-type]
    )


def parse_batch(text: str) -> list[Command]:
    """Parse batch file contents into commands, in file order.

    Raises:
        BatchSyntaxError: On unterminated strings, dangling escapes,
            unknown options or options missing their argument.
    """
    commands = [_command_from_args(args, lineno) for lineno, args in _Scanner(text).lines()]
    log.debug("Parsed %d command(s) from batch text", len(commands))
    return commands


def parse_batch_file(path: Path) -> list[Command]:
    """Read and parse a batch file."""
    return parse_batch(path.read_text())
