"""Command line for the LZ compressor: option parsing and the main entry point."""

from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path

from gsromtools.lz.commands import COMPRESSION_METHODS, MAX_FILE_SIZE, LZError
from gsromtools.lz.compress import COMPRESSORS, compress
from gsromtools.lz.decompress import expand_commands, parse_commands
from gsromtools.lz.output import (
    encode_commands,
    format_commands,
    format_commands_with_padding,
)

PROGRAM_NAME = "lzcomp"
MAX_ALIGNMENT = 12

_NUMBER = re.compile(r"[ \t\n\v\f\r]*([+-]?)([0-9]+)")


@dataclass
class Options:
    """Parsed command-line settings.

    mode is 0 to compress, 1 to compress to text, 2 to uncompress and
    3 to dump a compressed file's commands as text. A method of
    COMPRESSION_METHODS or more means the best combination of all methods.
    """

    input: str | None = None
    output: str | None = None
    method: int = COMPRESSION_METHODS
    mode: int = 0
    alignment: int = 0


class _InfoExit(Exception):
    """Raised when the help text or the compressor list was asked for."""

    def __init__(self, kind: str):
        super().__init__(kind)
        self.kind = kind


def _option_argument(args: list[str], index: int) -> tuple[str, str, int]:
    arg = args[index]
    if arg[1] == "-":
        option = arg
        index += 1
        value = args[index] if index < len(args) else None
    else:
        option = "-" + arg[1]
        value = arg[2:]
    if not value:
        raise LZError(f"option {option} requires an argument", 3)
    return option, value, index


def _numeric_argument(args: list[str], index: int, limit: int) -> tuple[int, int]:
    option, value, index = _option_argument(args, index)
    match = _NUMBER.fullmatch(value)
    if not match:
        raise LZError(f"invalid argument to option {option}", 3)
    number = int(match.group(2))
    # a negated non-zero value wraps around to a huge unsigned number
    if match.group(1) == "-" and number:
        number = limit + 1
    if number > limit:
        raise LZError(f"argument to option {option} must be between 0 and {limit}", 3)
    return number, index


def find_compressor(name) -> int | None:
    """Return the index of the compressor whose name starts with name; None for '*'."""
    if name == "*":
        return None
    found = None
    for index, compressor in enumerate(COMPRESSORS):
        if not compressor.name.startswith(name):
            continue
        if found is not None:
            raise LZError(f"ambiguous compressor prefix: {name}", 3)
        found = index
    if found is None:
        raise LZError(f"unknown compressor: {name}", 3)
    return found


def get_options(argv) -> Options:
    """Parse the arguments that follow the program name."""
    args = list(argv)
    if not args:
        raise _InfoExit("usage")
    options = Options()
    compressor: int | None = None
    index = 0
    while index < len(args):
        arg = args[index]
        if not arg.startswith("-") or arg == "-":
            break
        if arg == "--":
            index += 1
            break
        if arg in ("--text", "-t"):
            options.mode = 1
        elif arg in ("--binary", "-b"):
            options.mode = 0
        elif arg in ("--uncompress", "-u"):
            options.mode = 2
        elif arg in ("--dump", "-d"):
            options.mode = 3
        elif arg == "--align" or arg.startswith("-a"):
            options.alignment, index = _numeric_argument(args, index, MAX_ALIGNMENT)
        elif arg == "--method" or arg.startswith("-m"):
            options.method, index = _numeric_argument(args, index, COMPRESSION_METHODS - 1)
        elif arg == "--compressor" or arg.startswith("-c"):
            _, name, index = _option_argument(args, index)
            compressor = find_compressor(name)
        elif arg in ("--optimize", "-o"):
            options.method = COMPRESSION_METHODS
            compressor = None
        elif arg in ("--help", "-?"):
            raise _InfoExit("usage")
        elif arg in ("--list", "-l"):
            raise _InfoExit("list")
        else:
            raise LZError(f"unknown option: {arg}", 3)
        index += 1

    if compressor is not None:
        if options.method >= COMPRESSION_METHODS:
            options.method = 0
        chosen = COMPRESSORS[compressor]
        if options.method >= chosen.methods:
            raise LZError(
                f"method for the {chosen.name} compressor must be between 0 and {chosen.methods - 1}",
                3,
            )
        options.method += sum(item.methods for item in COMPRESSORS[:compressor])

    positional = args[index:]
    if positional:
        if len(positional) > 2:
            raise LZError("too many command-line arguments", 3)
        if positional[0] != "-":
            options.input = positional[0]
        if len(positional) == 2 and positional[1] != "-":
            options.output = positional[1]
    return options


def usage_text(program_name) -> str:
    """Return the help text."""
    return (
        f"Usage: {program_name} [<options>] [<source file> [<output>]]\n\n"
        "Execution mode:\n"
        "    -b, --binary      Output the command stream as binary data (default).\n"
        "    -t, --text        Output the command stream as text.\n"
        "    -u, --uncompress  Process a compressed file and output the original data.\n"
        "    -d, --dump        Process a compressed file and dump the command stream as\n"
        "                      text (as if compressed with the --text option).\n"
        "    -l, --list        List compressors and their method numbers.\n"
        "    -?, --help        Print this help text and exit.\n"
        "Compression options:\n"
        "    -o, --optimize                 Use the best combination of compression\n"
        "                                   methods available (default).\n"
        "    -m<number>, --method <number>  Use only one specific compression method.\n"
        f"                                   Valid method numbers are between 0 and {COMPRESSION_METHODS - 1}.\n"
        "    -c<name>, --compressor <name>  Use the specified compressor: the method\n"
        "                                   number will be relative to that compressor.\n"
        "                                   Any prefix of the compressor name may be\n"
        "                                   specified. Use * to indicate any compressor.\n"
        "    -a<number>, --align <number>   Pad the compressed output with zeros until\n"
        "                                   the size has the specified number of low bits\n"
        "                                   cleared (default: 0).\n"
        "The source and output filenames can be given as - (or omitted) to use standard\n"
        "input and output. Use -- to indicate that subsequent arguments are file names.\n"
    )


def compressor_list_text() -> str:
    """Return the table of compressors with their method offsets and counts."""
    width = max([10, *(len(compressor.name) for compressor in COMPRESSORS)])
    lines = [f"{'Compressor':<{width}}  Offset  Methods\n", "-" * width + "  ------  -------\n"]
    offset = 0
    for compressor in COMPRESSORS:
        lines.append(f"{compressor.name:<{width}}  {offset:6d}  {compressor.methods:7d}\n")
        offset += compressor.methods
    lines.append("\n")
    lines.append("Note: the offset indicates the compressor's lowest method number when the\n")
    lines.append("--compressor option is not given. When that option is used, every compressor's\n")
    lines.append("methods are numbered from zero.\n")
    return "".join(lines)


def _read_input(path: str | None) -> bytes:
    if path is None:
        data = sys.stdin.buffer.read(MAX_FILE_SIZE + 1)
    else:
        try:
            with open(path, "rb") as stream:
                data = stream.read(MAX_FILE_SIZE + 1)
        except OSError as exc:
            raise LZError(f"could not open file {path} for reading", 1) from exc
    if len(data) > MAX_FILE_SIZE:
        raise LZError(f"file {path if path is not None else '<standard input>'} is too big", 1)
    return data


def _write_output(path: str | None, content: bytes | str) -> None:
    if isinstance(content, str):
        content = content.encode("ascii")
    if path is None:
        sys.stdout.buffer.write(content)
        sys.stdout.buffer.flush()
        return
    try:
        Path(path).write_bytes(content)
    except OSError as exc:
        raise LZError(f"could not open file {path} for writing", 1) from exc


def _run(options: Options) -> None:
    data = _read_input(options.input)
    if options.mode & 2:
        commands, remainder = parse_commands(data)
        if options.mode == 2:
            _write_output(options.output, expand_commands(commands, data))
        else:
            padding = data[len(data) - remainder:]
            _write_output(options.output, format_commands_with_padding(commands, data, padding))
        return
    commands = compress(data, options.method)
    if options.mode:
        _write_output(options.output, format_commands(commands, data, options.alignment))
    else:
        _write_output(options.output, encode_commands(commands, data, options.alignment))


def main(argv=None) -> int:
    if argv is None:
        program_name = os.path.basename(sys.argv[0]) or PROGRAM_NAME
        argv = sys.argv[1:]
    else:
        program_name = PROGRAM_NAME
    try:
        options = get_options(argv)
        _run(options)
    except _InfoExit as info:
        text = usage_text(program_name) if info.kind == "usage" else compressor_list_text()
        sys.stderr.write(text)
        return 3
    except LZError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.code
    return 0