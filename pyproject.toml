[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gsromtools"
version = "1.0.0"
description = "Build helpers for Game Boy Color ROM projects: palettes, tile graphics, LZ compression, checksums and patch files"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "game boy",
    "gbc",
    "rom",
    "lz",
    "compression",
    "tiles",
    "palette",
    "checksum",
    "build tools",
]
classifiers = [
    "Development Status :: 5 - Production/Stable",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
    "Topic :: System :: Archiving :: Compression",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
gsrom-gbcpal = "gsromtools.gbcpal:main"
gsrom-gfx = "gsromtools.gfx:main"
gsrom-lzcomp = "gsromtools.lz.cli:main"
gsrom-make-patch = "gsromtools.make_patch:main"
gsrom-png-dimensions = "gsromtools.png_dimensions:main"
gsrom-scan-includes = "gsromtools.scan_includes:main"
gsrom-stadium = "gsromtools.stadium:main"

[tool.hatch.build.targets.wheel]
packages = ["gsromtools"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
