"""Command line options of the explorer."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from typing import Any

DESCRIPTION = "etnblocks, Electroneum Blockchain Explorer"
DEFAULT_DAEMON_URL = "http:://127.0.0.1:26968"

_TRUE_WORDS = {"true", "1", "yes", "on"}
_FALSE_WORDS = {"false", "0", "no", "off"}

# (long name, short name, help)
_FLAGS: tuple[tuple[str, str | None, str], ...] = (
    ("help", "h", "produce help message"),
    ("testnet", "t", "use testnet blockchain"),
    ("stagenet", "s", "use stagenet blockchain"),
    ("enable-pusher", None, "enable signed transaction pusher"),
    (
        "enable-mixin-details",
        None,
        "enable mixin details for key images, e.g., timescale, mixin of mixins, in tx context",
    ),
    ("enable-key-image-checker", None, "enable key images file checker"),
    ("enable-output-key-checker", None, "enable outputs key file checker"),
    ("enable-json-api", None, "enable JSON REST api"),
    ("enable-tx-cache", None, "enable caching of transaction details"),
    ("show-cache-times", None, "show times of getting data from cache vs no cache"),
    ("enable-block-cache", None, "enable caching of block details"),
    (
        "enable-js",
        None,
        "enable checking outputs and proving txs using JavaScript on client side",
    ),
    ("enable-as-hex", None, "enable links to provide hex represtations of a tx and a block"),
    ("enable-autorefresh-option", None, "enable users to have the index page on autorefresh"),
    ("enable-emission-monitor", None, "enable Electroneum total emission monitoring thread"),
)

# (long name, short name, default, help)
_STRINGS: tuple[tuple[str, str | None, str | None, str], ...] = (
    ("port", "p", "8081", "default explorer port"),
    ("bindaddr", "x", "0.0.0.0", "default bind address for the explorer"),
    (
        "testnet-url",
        None,
        "",
        "you can specify testnet url, if you run it on mainnet or stagenet. "
        "link will show on front page to testnet explorer",
    ),
    (
        "stagenet-url",
        None,
        "",
        "you can specify stagenet url, if you run it on mainnet or testnet. "
        "link will show on front page to stagenet explorer",
    ),
    (
        "mainnet-url",
        None,
        "",
        "you can specify mainnet url, if you run it on testnet or stagenet. "
        "link will show on front page to mainnet explorer",
    ),
    ("no-blocks-on-index", None, "10", "number of last blocks to be shown on index page"),
    (
        "mempool-info-timeout",
        None,
        "5000",
        "maximum time, in milliseconds, to wait for mempool data for the front page",
    ),
    ("mempool-refresh-time", None, "5", "time, in seconds, for each refresh of mempool state"),
    (
        "bc-path",
        "b",
        None,
        "path to lmdb folder of the blockchain, e.g., ~/.electroneum/lmdb",
    ),
    ("ssl-crt-file", None, None, "path to crt file for ssl (https) functionality"),
    ("ssl-key-file", None, None, "path to key file for ssl (https) functionality"),
    ("deamon-url", "d", DEFAULT_DAEMON_URL, "Electroneum deamon url"),
)


class _RaisingParser(argparse.ArgumentParser):
    """Argument parser that raises instead of exiting."""

    def error(self, message: str) -> Any:  # type: ignore[override]
        raise ValueError(message)


def _parse_bool(text: str) -> bool:
    word = text.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value: {text!r}")


def _parse_size(text: str) -> int:
    try:
        value = int(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {text!r}") from exc
    if value < 0:
        raise argparse.ArgumentTypeError(f"number must not be negative: {text!r}")
    return value


def _option_strings(name: str, short: str | None) -> list[str]:
    strings = [f"--{name}"]
    if short:
        strings.append(f"-{short}")
    return strings


def build_parser() -> argparse.ArgumentParser:
    """Build the parser for all explorer options."""
    parser = _RaisingParser(prog="etnblocks", description=DESCRIPTION, add_help=False)

    for name, short, help_text in _FLAGS:
        parser.add_argument(
            *_option_strings(name, short),
            nargs="?",
            const=True,
            default=False,
            type=_parse_bool,
            help=help_text,
        )

    for name, short, default, help_text in _STRINGS:
        parser.add_argument(*_option_strings(name, short), default=default, help=help_text)

    parser.add_argument(
        "--concurrency",
        "-c",
        type=_parse_size,
        default=0,
        help="number of threads handling http queries. "
        "Default is 0 which means it is based you on the cpu",
    )
    parser.add_argument("txhash", nargs="*", help="transaction hashes")
    return parser


def _flag_forms() -> dict[str, str]:
    forms: dict[str, str] = {}
    for name, short, _ in _FLAGS:
        for option in _option_strings(name, short):
            forms[option] = f"--{name}=true"
    return forms


def _normalise_argv(argv: Sequence[str]) -> list[str]:
    """Give bare flags an explicit value so they never swallow the next word."""
    forms = _flag_forms()
    result: list[str] = []
    passthrough = False
    for token in argv:
        if passthrough:
            result.append(token)
        elif token == "--":
            passthrough = True
            result.append(token)
        else:
            result.append(forms.get(token, token))
    return result


class CmdLineOptions:
    """Parsed command line options.

    Raises ValueError for unknown options or values of the wrong kind.
    """

    def __init__(self, argv: Sequence[str] | None = None) -> None:
        self._parser = build_parser()
        self._values = self._parser.parse_args(_normalise_argv(list(argv or [])))
        if self._values.help:
            print(self.help_text())

    def get_option(self, name: str) -> Any:
        """Return the value of an option, or None when it has none."""
        value = getattr(self._values, name.replace("-", "_"), None)
        if value == [] or value is None:
            return None
        return value

    def help_text(self) -> str:
        """Return the description of all options."""
        return self._parser.format_help()