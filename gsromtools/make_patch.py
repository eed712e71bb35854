"""Fill in a virtual-console patch template from two builds of a ROM."""

from __future__ import annotations

import itertools
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from gsromtools.common import ToolError

PROGRAM_NAME = "make_patch"
USAGE = f"Usage: {PROGRAM_NAME} values.sym patched.gbc original.gbc vc.patch.template vc.patch"

BANK_SIZE = 0x4000
ROM_SIZE = 128 * BANK_SIZE
CHECKSUM_OFFSET = 0x14E
STADIUM_SIZE = 6 + 2 + 128 * 2 * 2
INT_MAX = 0x7FFFFFFF

_C_SPACE = " \t\n\v\f\r"
_WS_CLASS = r"[ \t\n\v\f\r]"
_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"

_OPERATORS = ("==", ">", "<", ">=", "<=", "!=", "||")
_PATCH_NAMES = ("patch", "PATCH", "patch_", "PATCH_", "patch/", "PATCH/")
_DWS_NAMES = ("dws", "DWS", "dws_", "DWS_", "dws/", "DWS/")
_DB_NAMES = ("db", "DB", "db_", "DB_", "db/", "DB/")
_HEX_NAMES = ("hex", "HEX", "HEx", "Hex", "heX", "hEX")


@dataclass(frozen=True)
class Symbol:
    """A named location with its bank-relative address and absolute offset."""

    name: str
    address: int
    offset: int


@dataclass(frozen=True)
class Patch:
    """A ROM region that a patch is allowed to change."""

    offset: int
    size: int


class SymbolTable:
    """Symbols in definition order; later definitions take precedence."""

    def __init__(self):
        self._symbols: list[Symbol] = []

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols)

    def add(self, name, bank, address) -> Symbol:
        if address < 0x8000:
            # ROM addresses are relative to their bank
            offset = address + (bank - 1) * BANK_SIZE if bank > 0 else address
        else:
            # RAM addresses are relative to the start of all RAM
            offset = address - 0x8000
        symbol = Symbol(name, address, offset)
        self._symbols.append(symbol)
        return symbol

    def find(self, name) -> Symbol:
        """Look a symbol up; a name starting with '.' matches a local label's tail."""
        for symbol in reversed(self._symbols):
            if len(name) > len(symbol.name):
                continue
            candidate = symbol.name[len(symbol.name) - len(name):] if name.startswith(".") else symbol.name
            if candidate == name:
                return symbol
        raise ToolError(f'Error: Unknown symbol: "{name}"')


def parse_number(text, base=0) -> int:
    """Parse a whole non-negative integer; base 0 honours 0x and 0 prefixes."""
    body = text.lstrip(_C_SPACE)
    negative = False
    if body[:1] in ("+", "-"):
        negative = body[0] == "-"
        body = body[1:]
    if base in (0, 16) and body[:2].lower() == "0x" and body[2:3] and body[2].lower() in _DIGITS[:16]:
        body = body[2:]
        base = 16
    elif base == 0:
        base = 8 if body.startswith("0") else 10
    valid = _DIGITS[:base]
    if not body or any(char not in valid for char in body.lower()):
        raise ToolError(f'Error: Cannot parse number: "{text}"')
    value = int(body, base)
    if negative:
        value = -value
    if value < 0 or value > INT_MAX:
        raise ToolError(f'Error: Cannot parse number: "{text}"')
    return value


def _parse_symbol_value(text: str) -> tuple[int, int]:
    if ":" in text:
        bank_text, address_text = text.split(":", 1)
        return parse_number(bank_text, 16), parse_number(address_text, 16)
    return 0, parse_number(text, 16)


def parse_symbols(text) -> SymbolTable:
    """Read 'bank:address name' lines from a symbol file's text."""
    table = SymbolTable()
    for line in re.split(r"[\r\n]", text):
        fields = re.split(r"[ \t]+", line.split(";", 1)[0].strip(" \t"))
        if len(fields) < 2:
            continue
        bank, address = _parse_symbol_value(fields[0])
        table.add(fields[1], bank, address)
    return table


def parse_arg_value(arg, absolute, symbols, patch_name=None) -> int:
    """Evaluate a template argument: an operator, a number or a symbol."""
    if arg in _OPERATORS:
        index = _OPERATORS.index(arg)
        return 0x11 if arg == "||" else index

    if arg[:1].isascii() and arg[:1].isdigit() or arg.startswith("+"):
        return parse_number(arg, 0)

    part = ""
    if arg.startswith(("<", ">")):
        part, arg = arg[0], arg[1:]

    offset_mod = 0
    plus = arg.find("+")
    if plus >= 0:
        offset_mod = parse_number(arg[plus:], 0)
        arg = arg[:plus]

    name = patch_name if arg == "@" else arg
    if name is None:
        raise ToolError('Error: No current patch for "@"')
    symbol = symbols.find(name)
    value = (symbol.offset if absolute else symbol.address) + offset_mod
    if part == "<":
        return value & 0xFF
    if part == ">":
        return value >> 8
    return value


def _hex(value: int, upper: bool, width: int = 0) -> str:
    digits = format(value & 0xFFFFFFFF, "X" if upper else "x")
    return digits.rjust(width, "0") if width >= 0 else digits.ljust(-width)


def _length_prefix(name: str, length: int) -> str:
    if name.endswith("/"):
        return ""
    return f"a{length}: " if name.endswith("_") else f"a{length}:"


def _split_command(command: str) -> tuple[str, list[str]]:
    text = command.lstrip(_C_SPACE)
    text = re.sub(f"({_WS_CLASS}){_WS_CLASS}+", r"\1", text)
    if text and text[-1] in _C_SPACE:
        text = text[:-1]
    name, *args = re.split(_WS_CLASS, text)
    return name, args


def _rom_bytes(rom: bytes, offset: int, length: int, which: str, hook: Symbol) -> bytes:
    if offset > len(rom) or offset + max(length, 0) > len(rom):
        raise ToolError(f'Error: Cannot seek to "vc_patch {hook.name}" in the {which} ROM')
    return rom[offset:offset + max(length, 0)]


def _patch_command(name, args, hook, symbols, patches, new_rom, orig_rom) -> str:
    if len(args) > 2:
        raise ToolError(f'Error: Invalid arguments for command: "{name}"')
    if hook is None:
        raise ToolError(f'Error: No current patch for command: "{name}"')
    offset = hook.offset + (parse_number(args[0], 0) if args else 0)
    _rom_bytes(orig_rom, offset, 0, "original", hook)
    _rom_bytes(new_rom, offset, 0, "new", hook)
    if len(args) == 2:
        length = parse_number(args[1], 0)
    else:
        length = symbols.find(hook.name + "_End").offset - offset
    patches.append(Patch(offset, length))
    new_bytes = _rom_bytes(new_rom, offset, length, "new", hook)
    orig_bytes = _rom_bytes(orig_rom, offset, length, "original", hook)
    upper = name[:1].isupper()
    if length == 1:
        text = "0x" + _hex(new_bytes[0], upper, 2)
    else:
        text = _length_prefix(name, length) + " ".join(_hex(byte, upper, 2) for byte in new_bytes)
    if new_bytes == orig_bytes:
        print(f'{PROGRAM_NAME}: Warning: "vc_patch {hook.name}" doesn\'t alter the ROM', file=sys.stderr)
    return text


def _hex_command(name, args, symbols, patch_name) -> str:
    if len(args) not in (1, 2):
        raise ToolError(f'Error: Invalid arguments for command: "{name}"')
    value = parse_arg_value(args[0], not name.endswith("~"), symbols, patch_name)
    padding = parse_number(args[1], 0) if len(args) > 1 else 2
    style = name.rstrip("~")
    if style == "HEx":
        return f"0x{_hex(value >> 8, True, padding - 2)}{_hex(value & 0xFF, False, 2)}"
    if style == "Hex":
        return f"0x{_hex(value >> 12, True, padding - 3)}{_hex(value & 0xFFF, False, 3)}"
    if style == "heX":
        return f"0x{_hex(value >> 8, False, padding - 2)}{_hex(value & 0xFF, True, 2)}"
    if style == "hEX":
        return f"0x{_hex(value >> 12, False, padding - 3)}{_hex(value & 0xFFF, True, 3)}"
    return "0x" + _hex(value, name[:1].isupper(), padding)


def _interpret_command(command, hook, symbols, patches, new_rom, orig_rom) -> str:
    name, args = _split_command(command)
    patch_name = hook.name if hook is not None else None
    upper = name[:1].isupper()

    if name in _PATCH_NAMES:
        return _patch_command(name, args, hook, symbols, patches, new_rom, orig_rom)

    if name in _DWS_NAMES:
        if not args:
            raise ToolError(f'Error: Invalid arguments for command: "{name}"')
        words = []
        for arg in args:
            value = parse_arg_value(arg, False, symbols, patch_name)
            if value > 0xFFFF:
                raise ToolError(f'Error: Invalid value for "{name}" argument: 0x{value:x}')
            words.append(f"{_hex(value & 0xFF, upper, 2)} {_hex(value >> 8, upper, 2)}")
        return _length_prefix(name, len(args) * 2) + " ".join(words)

    if name in _DB_NAMES:
        if len(args) != 1:
            raise ToolError(f'Error: Invalid arguments for command: "{name}"')
        value = parse_arg_value(args[0], False, symbols, patch_name)
        if value > 0xFF:
            raise ToolError(f'Error: Invalid value for "{name}" argument: 0x{value:x}')
        return _length_prefix(name, 1) + _hex(value, upper, 2)

    if name in _HEX_NAMES or (name.endswith("~") and name[:-1] in _HEX_NAMES):
        return _hex_command(name, args, symbols, patch_name)

    raise ToolError(f'Error: Unknown command: "{name}"')


def process_template(template, symbols, new_rom, orig_rom) -> tuple[str, list[Patch]]:
    """Fill in a template's commands; return the patch text and covered regions."""
    out: list[str] = []
    # The ROM checksum will always differ
    patches = [Patch(CHECKSUM_OFFSET, 2)]
    # The Stadium data will always differ
    if len(orig_rom) == ROM_SIZE:
        patches.append(Patch(ROM_SIZE - STADIUM_SIZE, STADIUM_SIZE))

    hook: Symbol | None = None
    chars = iter(template)

    def copy_line() -> None:
        for char in chars:
            out.append(char)
            if char in "\r\n":
                break

    for char in chars:
        if char == ";":
            out.append(char)
            copy_line()
        elif char == "{":
            command = "".join(itertools.takewhile(lambda c: c != "}", chars))
            out.append(_interpret_command(command, hook, symbols, patches, new_rom, orig_rom))
        elif char == "[":
            out.append(char)
            alternate = False
            label: list[str] = []
            for inner in chars:
                if not alternate and inner == "@":
                    # "@" designates an alternate name for the ".VC_" label
                    alternate = True
                    label.clear()
                elif inner == "]":
                    out.append(inner)
                    break
                else:
                    if not alternate:
                        out.append(inner)
                        if not (inner.isascii() and inner.isalnum()) and inner != "_":
                            inner = "_"
                    label.append(inner)
            hook = symbols.find(".VC_" + "".join(label))
            copy_line()
        else:
            out.append(char)

    return "".join(out), patches


def verify_completeness(orig_rom, new_rom, patches) -> bool:
    """Check that every byte the ROMs differ in lies inside some patch."""
    ordered = sorted(patches, key=lambda patch: patch.offset)
    offset = index = 0
    while True:
        orig_byte = orig_rom[offset] if 0 <= offset < len(orig_rom) else None
        new_byte = new_rom[offset] if 0 <= offset < len(new_rom) else None
        if orig_byte is None or new_byte is None:
            return orig_byte is None and new_byte is None
        patch = ordered[index] if index < len(ordered) else None
        if patch is not None and patch.offset == offset:
            if offset + 1 + patch.size < 0:
                return False
            offset += patch.size
            index += 1
        elif orig_byte != new_byte:
            shown = patch.offset if patch is not None else (ordered[-1].offset if ordered else 0)
            print(f"{PROGRAM_NAME}: Warning: Unpatched difference at offset: 0x{offset:x}", file=sys.stderr)
            print(f"    Original ROM value: 0x{orig_byte:02x}", file=sys.stderr)
            print(f"    Patched ROM value: 0x{new_byte:02x}", file=sys.stderr)
            print(f"    Current patch offset: 0x{shown:06x}", file=sys.stderr)
            return False
        offset += 1


def _read(path) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise ToolError(f'Could not open file "{path}": {exc.strerror}') from exc


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 5:
        print(USAGE, file=sys.stderr)
        return 1
    sym_path, new_path, orig_path, template_path, patch_path = args
    try:
        symbols = parse_symbols(_read(sym_path).decode("latin-1"))
        new_rom = _read(new_path)
        orig_rom = _read(orig_path)
        template = _read(template_path).decode("latin-1")
        text, patches = process_template(template, symbols, new_rom, orig_rom)
        try:
            Path(patch_path).write_bytes(text.encode("latin-1"))
        except OSError as exc:
            raise ToolError(f'Could not open file "{patch_path}": {exc.strerror}') from exc
    except ToolError as exc:
        print(f"{PROGRAM_NAME}: {exc}", file=sys.stderr)
        return 1
    if not verify_completeness(orig_rom, new_rom, patches):
        print(
            f'{PROGRAM_NAME}: Warning: Not all ROM differences are defined by "{patch_path}"',
            file=sys.stderr,
        )
    return 0