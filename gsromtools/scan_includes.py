"""List the files an assembly source pulls in with INCLUDE and INCBIN."""

from __future__ import annotations

import argparse
import re
import sys
from pathlib import Path
from typing import Iterator

from gsromtools.common import ToolError

PROGRAM_NAME = "scan_includes"
USAGE = f"Usage: {PROGRAM_NAME} [-h|--help] [-s|--strict] filename.asm"

_SPACE = " \t\n\v\f\r"
_MARKERS = re.compile(r'[;"Ii]')
_LINE_END = re.compile(r"[\r\n]")


def _at(text: str, pos: int) -> str:
    return text[pos] if pos < len(text) else "\0"


def scan_file(filename, strict=False) -> Iterator[str]:
    """Yield included and embedded file paths, descending into INCLUDEs."""
    try:
        raw = Path(filename).read_bytes()
    except OSError as exc:
        if strict:
            raise ToolError(f'Could not open file "{filename}": {exc.strerror}') from exc
        return
    text = raw.decode("latin-1").split("\0", 1)[0]
    size = len(text)
    pos = 0
    while pos < size:
        match = _MARKERS.search(text, pos)
        if match is None:
            break
        pos = match.start()
        char = text[pos]

        if char == ";":
            end = _LINE_END.search(text, pos + 1)
            pos = (end.start() if end else size) + 1
            continue

        if char == '"':
            end = text.find('"', pos + 1)
            pos = (end if end >= 0 else size) + 1
            continue

        before = text[pos - 1] if pos > 0 else "\n"
        if before not in _SPACE and before != ":":
            pos += 1
            continue
        is_incbin = text.startswith(("INCBIN", "incbin"), pos)
        is_include = text.startswith(("INCLUDE", "include"), pos)
        if not (is_incbin or is_include):
            pos += 1
            continue

        pos += 7 if is_include else 6
        follow = _at(text, pos)
        if follow not in _SPACE and follow != '"':
            pos += 1
            continue
        while _at(text, pos) in " \t":
            pos += 1
        if _at(text, pos) == '"':
            start = pos + 1
            end = text.find('"', start)
            if end < 0:
                end = size
            path = text[start:end]
            yield path
            if is_include:
                yield from scan_file(path, strict)
            # the character after the closing quote is skipped as well
            pos = end + 2
        else:
            kind = "LUDE" if is_include else "BIN"
            print(f"{filename}: no file path after INC{kind}", file=sys.stderr)
            if _at(text, pos) == ";":
                pos -= 1
            pos += 1


class _UsageError(Exception):
    pass


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        raise _UsageError(message)


def main(argv=None) -> int:
    parser = _Parser(prog=PROGRAM_NAME, add_help=False)
    parser.add_argument("-s", "--strict", action="store_true")
    parser.add_argument("-h", "--help", action="store_true")
    parser.add_argument("files", nargs="*")
    try:
        args = parser.parse_intermixed_args(argv)
    except _UsageError:
        print(USAGE, file=sys.stderr)
        return 1
    if args.help:
        print(USAGE, file=sys.stderr)
        return 0
    if not args.files:
        print(USAGE, file=sys.stderr)
        return 1
    try:
        for path in scan_file(args.files[0], args.strict):
            sys.stdout.write(f"{path} ")
    except ToolError as exc:
        sys.stdout.flush()
        print(f"{PROGRAM_NAME}: {exc}", file=sys.stderr)
        return 1
    return 0