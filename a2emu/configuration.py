"""Machine configurations: preset models, merging and command line flags."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

CONFIG_SUFFIX = ".cfg"
DEFAULT_CONFIGURATION = "2enh"
DEFAULT_CONFIG_DIR = Path(__file__).resolve().parent / "configs"

CONF_PARENT = "parent"
CONF_MODEL = "model"
CONF_NAME = "name"
CONF_BOARD = "board"

CONF_ROM = "rom"
CONF_CHAR_ROM = "charrom"
CONF_CPU = "cpu"
CONF_SPEED = "speed"
CONF_RAMWORKS = "ramworks"
CONF_NSC = "nsc"
CONF_TRACE = "trace"
CONF_PROFILE = "profile"
CONF_SHOW_CONFIG = "showConfig"
CONF_FORCE_CAPS = "forceCaps"
CONF_RGB = "rgb"
CONF_ROMX = "romx"
CONF_MODS = "mods"

CONF_SLOTS = tuple(f"s{slot}" for slot in range(8))

_PARAM_DESCRIPTIONS = {
    CONF_MODEL: "set base model",
    CONF_ROM: "main rom file",
    CONF_CHAR_ROM: "rom file for the character generator",
    CONF_CPU: "cpu type, can be '6502' or '65c02'",
    CONF_SPEED: "cpu speed in Mhz, can be 'ntsc', 'pal', 'full' or a decimal nunmber",
    CONF_MODS: "comma separated list of mods applied to the board, "
    "available mods are 'shift', 'four-colors",
    CONF_RAMWORKS: "memory to use with RAMWorks card, max is 16384",
    CONF_NSC: "add a DS1216 No-Slot-Clock on the main ROM (use 'main') or a slot ROM",
    CONF_TRACE: "trace CPU execution with one or more comma separated tracers",
    CONF_PROFILE: "generate profile trace to analyse with pprof",
    CONF_SHOW_CONFIG: "show the calculated configuration and exit",
    CONF_FORCE_CAPS: "force all letters to be uppercased (no need for caps lock!)",
    CONF_RGB: "emulate the RGB modes of the 80col RGB card for DHGR",
    CONF_ROMX: "emulate a RomX",
    **{slot: f"slot {slot[1:]} configuration." for slot in CONF_SLOTS},
}

_BOOL_PARAMS = frozenset({CONF_PROFILE, CONF_SHOW_CONFIG, CONF_FORCE_CAPS, CONF_RGB, CONF_ROMX})


@dataclass
class Configuration:
    """Key/value settings; lookups and ``set`` use lower case keys."""

    data: dict[str, str] = field(default_factory=dict)

    def get_has(self, key: str) -> Optional[str]:
        """Return the value for ``key``, or None when it is missing."""
        return self.data.get(key.lower())

    def has(self, key: str) -> bool:
        return key.lower() in self.data

    def get(self, key: str) -> str:
        """Return the value for ``key``; raise KeyError when it is missing."""
        try:
            return self.data[key.lower()]
        except KeyError:
            raise KeyError(f"key {key} not found") from None

    def get_flag(self, key: str) -> bool:
        return self.get(key) == "true"

    def set(self, key: str, value: str) -> None:
        self.data[key.lower()] = value

    def dump(self) -> None:
        """Print every setting, sorted by key."""
        print("Configuration:")
        for key in sorted(self.data):
            print(f"  {key}: {self.data[key]}")


def parse_configuration(text: str, source: str) -> Configuration:
    """Parse ``key: value`` lines; blank lines and ``#`` comments are skipped."""
    config = Configuration()
    for index, line in enumerate(text.split("\n")):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, colon, value = line.partition(":")
        if not colon:
            raise ValueError(f"invalid configuration in {source}:{index}")
        config.data[key.strip()] = value.strip()
    return config


def merge_configs(base: Configuration, addition: Configuration) -> Configuration:
    """Return a new configuration with ``addition`` overriding ``base``."""
    result = Configuration()
    for key, value in base.data.items():
        result.set(key, value)
    for key, value in addition.data.items():
        result.set(key, value)
    return result


@dataclass
class ConfigurationModels:
    """The preset models by name; a model may inherit from a ``parent``."""

    preconfigured: dict[str, Configuration] = field(default_factory=dict)

    def get(self, name: str) -> Configuration:
        """Return model ``name`` merged over its parents."""
        name = name.strip()
        config = self.preconfigured.get(name)
        if config is None:
            raise LookupError(f"configuration {name}.cfg not found")
        parent_name = config.get_has(CONF_PARENT)
        if parent_name is None:
            return config
        return merge_configs(self.get(parent_name), config)

    def available_models(self) -> list[str]:
        """Names of the models meant for users (not starting with ``_``)."""
        return sorted(name for name in self.preconfigured if not name.startswith("_"))

    def get_with_overrides(
        self, model: str, overrides: Optional[Configuration]
    ) -> Configuration:
        config = self.get(model)
        if overrides is not None:
            config = merge_configs(config, overrides)
        return config


def load_configuration_models(
    directory: Union[str, Path, None] = None,
) -> tuple[ConfigurationModels, Configuration]:
    """Load every ``*.cfg`` in ``directory``; return the models and the default."""
    directory = Path(directory) if directory is not None else DEFAULT_CONFIG_DIR
    configs: dict[str, Configuration] = {}
    for path in sorted(directory.iterdir()):
        if path.is_file() and path.name.lower().endswith(CONFIG_SUFFIX):
            text = path.read_text(encoding="utf-8")
            configs[path.name[: -len(CONFIG_SUFFIX)]] = parse_configuration(text, path.name)

    models = ConfigurationModels(configs)
    default = models.get(DEFAULT_CONFIGURATION)
    default.set(CONF_MODEL, DEFAULT_CONFIGURATION)
    return models, default


def build_argument_parser(
    models: ConfigurationModels, configuration: Configuration
) -> argparse.ArgumentParser:
    """Build the command line parser, with defaults taken from ``configuration``.

    Options that are not given on the command line are left out of the result.
    """
    lines = ["The available pre-configured models are:"]
    for model in models.available_models():
        lines.append(f"  {model}: {models.get(model).get(CONF_NAME)}")

    parser = argparse.ArgumentParser(
        allow_abbrev=False,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="\n".join(lines),
    )
    for name, description in _PARAM_DESCRIPTIONS.items():
        default = configuration.get_has(name)
        if default is None:
            raise ValueError(f"default value not found for {name}")
        help_text = description.replace("%", "%%")
        if default:
            help_text += f" (default {default!r})".replace("%", "%%")
        options = (f"-{name}", f"--{name}")
        if name in _BOOL_PARAMS:
            parser.add_argument(
                *options, dest=name, action="store_const", const="true",
                default=argparse.SUPPRESS, help=help_text,
            )
        else:
            parser.add_argument(
                *options, dest=name, metavar="value",
                default=argparse.SUPPRESS, help=help_text,
            )
    parser.add_argument(
        "files", metavar="file", nargs="*", default=[],
        help="path to image to use on the boot device",
    )
    return parser


def configuration_from_command_line(
    models: ConfigurationModels,
    default: Configuration,
    argv: Optional[Sequence[str]] = None,
) -> tuple[Configuration, list[str]]:
    """Apply the command line to the default model; return it and the files."""
    parser = build_argument_parser(models, default)
    values = vars(parser.parse_args(argv))
    filenames = list(values.pop("files", []))

    configuration = default
    model = values.get(CONF_MODEL)
    if model is not None and model.strip() != DEFAULT_CONFIGURATION:
        configuration = models.get(model)
    configuration = merge_configs(configuration, Configuration())

    for name, value in values.items():
        configuration.set(name, value)
    return configuration, filenames