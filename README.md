# gsromtools

A set of small command-line tools and Python modules for the helper steps of
building Game Boy Color ROMs from disassembly sources:

- merging sprite palettes into a single four-colour `.gbcpal` file,
- post-processing 1bpp/2bpp tile data (trimming, de-duplicating, interleaving),
- compressing and decompressing graphics in the game's LZ format,
- listing the files an assembly source includes,
- writing the Pokémon Stadium checksum block and the global ROM checksum,
- filling in Virtual Console patch templates from a symbol file,
- deriving a sprite's tile dimensions from its PNG.

No third-party libraries are needed.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Commands

Every command prints its usage line to standard error when called with
missing arguments, and reports failures as `<name>: <message>` with a
non-zero exit status.

### gsrom-gbcpal

```
gsrom-gbcpal [-h|--help] [-r|--reverse] out.gbcpal in.gbcpal...
```

Reads the colours of every input palette, sorts them from lightest to darkest
(darkest to lightest with `--reverse`), drops black, white and repeated
neighbouring colours, and writes a palette of white, the remaining colours,
and black. A single remaining colour fills both middle slots; with none, the
middle slots are white and black. More than two remaining colours is an error.

### gsrom-gfx

```
gsrom-gfx [-h|--help] [--trim-whitespace] [--remove-whitespace] [--interleave]
          [--remove-duplicates [--keep-whitespace]] [--remove-xflip] [--remove-yflip]
          [--preserve indexes] [-d|--depth depth] [-p|--png filename.png]
          [-o|--out outfile] infile
```

Post-processes raw tile data. The steps run in a fixed order: trim trailing
blank tiles, interleave, remove duplicates, remove x-flipped, y-flipped and
(when both are asked for) xy-flipped copies, then remove blank tiles.
`--depth` is 2 by default; `--interleave` needs `--png` to learn the image
width; `--preserve` takes a comma-separated list of tile indexes that are never
removed and may be given more than once. Without `--out` nothing is written.

### gsrom-lzcomp

```
gsrom-lzcomp [<options>] [<source file> [<output>]]
```

Execution mode:

- `-b`, `--binary` — write the compressed command stream as binary (default)
- `-t`, `--text` — write the command stream as assembly text
- `-u`, `--uncompress` — decompress a compressed file
- `-d`, `--dump` — dump a compressed file's command stream as text
- `-l`, `--list` — list compressors and their method numbers
- `-?`, `--help` — print the help text

Compression options:

- `-o`, `--optimize` — combine the best results of every method (default)
- `-m<number>`, `--method <number>` — use a single method (0–95)
- `-c<name>`, `--compressor <name>` — pick a compressor (`singlepass`, `null`,
  `repetitions`, `multipass`, or any unambiguous prefix; `*` for any); the
  method number is then relative to that compressor
- `-a<number>`, `--align <number>` — pad the output with zeros until its size
  has that many low bits cleared (0–12)

Source and output may be given as `-` or left out to use standard input and
output. `--` marks the end of the options. Input is limited to 32768 bytes.
Option errors exit with status 3, as do `--help` and `--list`.

### gsrom-make-patch

```
gsrom-make-patch values.sym patched.gbc original.gbc vc.patch.template vc.patch
```

Fills in the `{...}` commands (`patch`, `dws`, `db`, `hex` and their variants)
of a patch template using the symbol file and the two ROMs, and warns on
standard error about patches that change nothing and about ROM differences
that no patch accounts for.

### gsrom-png-dimensions

```
gsrom-png-dimensions front.png front.dimensions
```

Writes a one-byte dimensions file for a 40, 48 or 56 pixel wide sprite.

### gsrom-scan-includes

```
gsrom-scan-includes [-h|--help] [-s|--strict] filename.asm
```

Prints every `INCLUDE` and `INCBIN` path, each followed by a space, following
includes recursively. Files that cannot be opened are skipped unless
`--strict` is given.

### gsrom-stadium

```
gsrom-stadium pokegold.gbc
```

For a 2 MB ROM, writes the `N64PS3` header, the half-bank checksums and their
CRC at the end of the ROM, then updates the global checksum. Files of any other
size are written back unchanged.

## Python modules

Each command is also usable as a library, and each module's `main(argv)` can
be called with a list of arguments.

- `gsromtools.gbcpal` — `Color`, `parse_gbcpal`, `read_gbcpal`,
  `build_palette`, `encode_palette`
- `gsromtools.gfx` — `GfxOptions`, `Graphic`, `process`, `parse_args`
- `gsromtools.png_dimensions` — `read_png_dimensions`
- `gsromtools.scan_includes` — `scan_file`, a generator of paths
- `gsromtools.stadium` — `calculate_checksums`, `calculate_checksum`, `crc_table`
- `gsromtools.make_patch` — `SymbolTable`, `parse_symbols`, `parse_arg_value`,
  `process_template`, `verify_completeness`
- `gsromtools.common` — `ToolError`, `read_png_width`, `read_dimensions`

The LZ codec lives in `gsromtools.lz`: `gsromtools.lz.compress.compress`
produces a list of `Command` objects, `gsromtools.lz.output.encode_commands`
turns it into bytes (and `format_commands` into assembly text), and
`gsromtools.lz.decompress.decompress` restores the original data. LZ failures
raise `gsromtools.lz.commands.LZError`.

```python
from gsromtools.lz.compress import compress
from gsromtools.lz.decompress import decompress
from gsromtools.lz.output import encode_commands

data = bytes(range(16)) * 4
packed = encode_commands(compress(data), data)
assert decompress(packed) == data
```

## What it does not do

The package provides the helper steps only. It does not assemble or link
ROMs, fix cartridge headers, or convert PNG images into tile data or
palettes; of a PNG it reads only the width from its header.