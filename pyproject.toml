[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "a2emu"
version = "0.1.0"
description = "Building blocks for an Apple II emulator: memory map, soft switches, clocks, 80-column cards and machine configuration"
requires-python = ">=3.10"
keywords = [
    "apple2",
    "apple ii",
    "emulator",
    "mc6845",
    "videx",
    "retrocomputing",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
]
dependencies = [
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["a2emu"]

[tool.hatch.build.targets.sdist]
include = [
    "a2emu",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
