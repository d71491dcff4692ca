"""Configuration and command-line argument parsing for the vSwitch datapath.

The application arguments follow the DPDK EAL arguments, which the EAL
init has already stripped. What is left is parsed here once, at startup,
into an immutable :class:`AppConfig`.
"""

import argparse
import logging
import re
import string
import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence, TextIO, Tuple

from ovdkargs.logs import level_name

logger = logging.getLogger("ovdkargs")

PARAM_STATS_INTERVAL = "stats_int"
PARAM_STATS_CORE = "stats_core"

_SHORT_OPTIONS = ("-p", "-v", "-J")
_LONG_OPTIONS = ("--" + PARAM_STATS_INTERVAL, "--" + PARAM_STATS_CORE)

PORTMASK_BASE = 16
LOG_LEVEL_BASE = 10

DEFAULT_LOG_LEVEL = 4
MAX_LOG_LEVEL = 8
DEFAULT_MAX_FRAME_SIZE = 1518

_UINT32_MAX = (1 << 32) - 1
_UINT64_MAX = (1 << 64) - 1

_LENIENT_INT = re.compile(r"\s*([+-]?[0-9]+)")


@dataclass(frozen=True)
class AppConfig:
    """Process-wide configuration, written once at startup."""

    port_mask: int = 0
    log_level: int = DEFAULT_LOG_LEVEL
    stats_interval: int = 0
    stats_core: int = -1
    max_frame_size: int = DEFAULT_MAX_FRAME_SIZE

    def ports(self) -> List[int]:
        """Port indices selected by the mask, lowest first.

        Whether those ports exist is for the caller to check.
        """
        return [bit for bit in range(self.port_mask.bit_length()) if self.port_mask >> bit & 1]

    @property
    def stats_enabled(self) -> bool:
        return self.stats_interval > 0


class ConfigError(ValueError):
    """An application argument was rejected."""

    fatal = True

    def __init__(self, message: str, option: Optional[str] = None):
        super().__init__(message)
        self.option = option
        # Values accepted before the failing option, when known.
        self.config: Optional[AppConfig] = None


class PortmaskError(ConfigError):
    pass


class LogLevelError(ConfigError):
    pass


class UnknownOptionError(ConfigError):
    """Unrecognised option, or an option missing its argument."""


class FrameSizeError(ConfigError):
    # Left to the caller whether this stops the process.
    fatal = False


def _parse_unsigned(text: str, base: int) -> Optional[int]:
    """Parse a whole string the way ``strtoul`` does, minus the negation.

    None if anything is left over after the digits.
    """
    digits = text.lstrip()
    if digits[:1] == "+":
        digits = digits[1:]
    if base == 16 and digits[:2].lower() == "0x":
        digits = digits[2:]
    allowed = string.hexdigits if base == 16 else string.digits
    if not digits or any(c not in allowed for c in digits):
        return None
    return int(digits, base)


def parse_portmask(text: str) -> int:
    """Parse the hex portmask given with ``-p``.

    The mask is only parsed, not checked against the ports actually
    present.
    """
    value = _parse_unsigned(text, PORTMASK_BASE)
    if value is None or value > _UINT64_MAX:
        raise PortmaskError("Invalid portmask specified '%s'" % text, "-p")
    return value


def parse_log_level(text: str) -> int:
    value = _parse_unsigned(text, LOG_LEVEL_BASE)
    if value is None or not 1 <= value <= MAX_LOG_LEVEL:
        raise LogLevelError("Invalid log level specified '%s'" % text, "-v")
    return value


def parse_frame_size(text: str) -> int:
    value = _parse_unsigned(text, 10)
    if value is None or value == 0 or value > _UINT32_MAX:
        raise FrameSizeError("Invalid frame size specified '%s'" % text, "-J")
    return value


def lenient_int(text: str) -> int:
    """Convert like C ``atoi``: leading digits only, 0 when there are none."""
    match = _LENIENT_INT.match(text)
    return int(match.group(1)) if match else 0


class _ValidatedOption(argparse.Action):
    """Store an option's value only after its converter accepts it."""

    def __init__(self, option_strings, dest, converter=None, **kwargs):
        super().__init__(option_strings, dest, **kwargs)
        self.converter = converter

    def __call__(self, parser, namespace, values, option_string=None):
        try:
            value = self.converter(values)
        except ConfigError as e:
            # Options seen before this one keep their values.
            e.config = AppConfig(**vars(namespace))
            raise
        logger.debug("Accepted %s=%r", option_string, value)
        setattr(namespace, self.dest, value)


def _build_parser() -> argparse.ArgumentParser:
    defaults = AppConfig()
    parser = argparse.ArgumentParser(
        add_help=False,
        allow_abbrev=False,
        exit_on_error=False,
    )
    parser.add_argument(
        "-p",
        dest="port_mask",
        action=_ValidatedOption,
        converter=parse_portmask,
        default=defaults.port_mask,
    )
    parser.add_argument(
        "-v",
        dest="log_level",
        action=_ValidatedOption,
        converter=parse_log_level,
        default=defaults.log_level,
    )
    parser.add_argument(
        "-J",
        dest="max_frame_size",
        action=_ValidatedOption,
        converter=parse_frame_size,
        default=defaults.max_frame_size,
    )
    parser.add_argument(
        "--" + PARAM_STATS_INTERVAL,
        dest="stats_interval",
        action=_ValidatedOption,
        converter=lenient_int,
        default=defaults.stats_interval,
    )
    parser.add_argument(
        "--" + PARAM_STATS_CORE,
        dest="stats_core",
        action=_ValidatedOption,
        converter=lenient_int,
        default=defaults.stats_core,
    )
    return parser


def _bind_options(argv: Sequence[str]) -> Tuple[List[str], Optional[ConfigError]]:
    """Pair each option with its argument the way ``getopt_long`` does.

    An option's argument is the rest of the word or else the next word,
    whatever it looks like. Returns ``OPT=VALUE`` words for the options
    before the first unknown one, plus the error for that option.
    """
    bound = []
    words = iter(argv)
    for word in words:
        if word == "--":
            break
        if not word.startswith("-") or word == "-":
            # getopt permutes non-option words to the end.
            continue
        if word.startswith("--"):
            name, sep, value = word.partition("=")
            if name in _LONG_OPTIONS:
                matches = [name]
            else:
                matches = [option for option in _LONG_OPTIONS if option.startswith(name)]
            if len(matches) != 1:
                return bound, UnknownOptionError("Invalid option '%s'" % name, name)
            option = matches[0]
        else:
            option, value = word[:2], word[2:]
            sep = "=" if value else ""
            if option not in _SHORT_OPTIONS:
                return bound, UnknownOptionError("Invalid option '%s'" % option, option)
        if not sep:
            value = next(words, None)
            if value is None:
                return bound, UnknownOptionError("Invalid option '%s'" % option, option)
        bound.append("%s=%s" % (option, value))
    return bound, None


def parse_args(argv: Sequence[str]) -> AppConfig:
    """Parse application arguments (without the program name).

    Options are handled in order; the first rejected one raises a
    :class:`ConfigError` subclass.
    """
    bound, unknown = _bind_options(argv)
    args = _build_parser().parse_args(bound)
    if unknown is not None:
        raise unknown
    return AppConfig(**vars(args))


def usage(name: str, file: Optional[TextIO] = None) -> None:
    """Print usage instructions."""
    names = ["%d=%s" % (level, level_name(level)) for level in range(1, MAX_LOG_LEVEL + 1)]
    levels = ",\n                              ".join(
        ", ".join(names[i:i + 4]) for i in range(0, len(names), 4)
    )
    print(
        f"{name}: Intel DPDK vSwitch datapath application\n"
        f"usage: {name} [EAL] -- [ARG...]\n"
        "\n"
        "Required Arguments:\n"
        "  -p PORTMASK                 hex bitmask of phy ports to use\n"
        "\n"
        "Optional Arguments:\n"
        "  -v LOG_LEVEL                verbosity of ovs-dpdk logging "
        f"(default: {DEFAULT_LOG_LEVEL})\n"
        f"                              {levels}\n"
        "                              ** Higher log levels print all lower level logs **\n"
        f"  --{PARAM_STATS_INTERVAL} INT             print stats every INT (default: 0)\n"
        f"  --{PARAM_STATS_CORE} CORE           id of core used to print stats\n"
        f"  -J FRAME_SIZE               maximum frame size (default: {DEFAULT_MAX_FRAME_SIZE})",
        file=file if file is not None else sys.stdout,
    )


_DEFAULTS = AppConfig()
_current: Optional[AppConfig] = None


def parse_app_args(argv: Sequence[str]) -> int:
    """Parse ``argv`` (program name first) and publish the result.

    Returns 0 on success and -1 on an invalid frame size, in which case
    the options before it are still published. Any other invalid
    argument prints usage and exits the process.
    """
    global _current
    if _current is not None:
        raise RuntimeError("Application arguments have already been parsed")

    progname = argv[0] if argv else "ovdkargs"
    try:
        config = parse_args(argv[1:])
    except ConfigError as e:
        usage(progname)
        if not e.fatal:
            logger.debug("Soft argument error: %s", e)
            _current = e.config
            return -1
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    _current = config
    return 0


def current_config() -> AppConfig:
    """The published configuration, or the defaults before parsing."""
    return _current if _current is not None else _DEFAULTS


def get_portmask() -> int:
    return current_config().port_mask


def get_log_level() -> int:
    return current_config().log_level


def get_stats_interval() -> int:
    return current_config().stats_interval


def get_stats_core() -> int:
    return current_config().stats_core


def get_max_frame_size() -> int:
    return current_config().max_frame_size
