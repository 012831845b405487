"""Network types, default blockchain locations and path helpers."""

from __future__ import annotations

import enum
import os
import sys
from pathlib import Path

PATH_SEPARATOR = "/"


class NetworkType(enum.IntEnum):
    """The network a blockchain belongs to."""

    MAINNET = 0
    TESTNET = 1
    STAGENET = 2


def remove_trailing_path_separator(path: str | os.PathLike[str]) -> str | Path:
    """Drop one trailing path separator; strings stay strings, paths stay paths."""
    if isinstance(path, str):
        return path[:-1] if path.endswith(PATH_SEPARATOR) else path
    return Path(remove_trailing_path_separator(os.fspath(path)))


def get_default_data_dir() -> str:
    """Return the default data directory of the node software."""
    if sys.platform.startswith("win"):
        base = os.environ.get("APPDATA") or str(Path.home())
        return str(Path(base) / "electroneum")
    return str(Path.home() / ".electroneum")


def get_default_lmdb_folder(nettype: NetworkType = NetworkType.MAINNET) -> str:
    """Return the default location of the LMDB database for a network."""
    data_dir = get_default_data_dir()
    if nettype == NetworkType.TESTNET:
        data_dir += "/testnet"
    elif nettype == NetworkType.STAGENET:
        data_dir += "/stagenet"
    return data_dir + "/lmdb"


def get_blockchain_path(
    bc_path: str | os.PathLike[str] | None = None,
    nettype: NetworkType = NetworkType.MAINNET,
) -> Path:
    """Resolve the blockchain folder, falling back to the network's default.

    Raises NotADirectoryError when the folder does not exist.
    """
    path = Path(bc_path) if bc_path is not None else Path(get_default_lmdb_folder(nettype))
    if not path.is_dir():
        raise NotADirectoryError(f'Given path "{path}" is not a folder or does not exist')
    return Path(remove_trailing_path_separator(path))


def read_file(filename: str | os.PathLike[str]) -> str:
    """Return the whole content of a text file.

    Raises FileNotFoundError when the file does not exist.
    """
    path = Path(filename)
    if not path.exists():
        raise FileNotFoundError(f"File does not exist: {path}")
    return path.read_text(encoding="utf-8")