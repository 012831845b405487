from pathlib import Path

import pytest

from etnblocks.paths import (
    NetworkType,
    get_blockchain_path,
    get_default_data_dir,
    get_default_lmdb_folder,
    read_file,
    remove_trailing_path_separator,
)


def test_remove_trailing_separator_from_string():
    assert remove_trailing_path_separator("/data/lmdb/") == "/data/lmdb"
    assert remove_trailing_path_separator("/data/lmdb") == "/data/lmdb"
    assert remove_trailing_path_separator("") == ""


def test_remove_trailing_separator_only_one():
    assert remove_trailing_path_separator("a//") == "a/"


def test_remove_trailing_separator_keeps_path_type():
    result = remove_trailing_path_separator(Path("/data/lmdb"))
    assert result == Path("/data/lmdb")


@pytest.mark.parametrize(
    "nettype, suffix",
    [
        (NetworkType.MAINNET, "/lmdb"),
        (NetworkType.TESTNET, "/testnet/lmdb"),
        (NetworkType.STAGENET, "/stagenet/lmdb"),
    ],
)
def test_default_lmdb_folder(nettype, suffix):
    assert get_default_lmdb_folder(nettype) == get_default_data_dir() + suffix


def test_default_lmdb_folder_is_mainnet_by_default():
    assert get_default_lmdb_folder() == get_default_lmdb_folder(NetworkType.MAINNET)


def test_default_data_dir_follows_home(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    monkeypatch.setenv("APPDATA", str(tmp_path))
    assert Path(get_default_data_dir()).parent == tmp_path


def test_blockchain_path_given(tmp_path):
    assert get_blockchain_path(str(tmp_path) + "/") == tmp_path


def test_blockchain_path_missing(tmp_path):
    with pytest.raises(NotADirectoryError):
        get_blockchain_path(tmp_path / "missing")


def test_blockchain_path_file_is_not_folder(tmp_path):
    target = tmp_path / "file.txt"
    target.write_text("x")
    with pytest.raises(NotADirectoryError):
        get_blockchain_path(target)


def test_blockchain_path_default(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    monkeypatch.setenv("APPDATA", str(tmp_path))
    expected = Path(get_default_lmdb_folder(NetworkType.TESTNET))
    expected.mkdir(parents=True)
    assert get_blockchain_path(None, NetworkType.TESTNET) == expected


def test_read_file_round_trip(tmp_path):
    target = tmp_path / "emission_amount.txt"
    target.write_text("10,20,30,60\n", encoding="utf-8")
    assert read_file(target) == "10,20,30,60\n"


def test_read_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_file(tmp_path / "absent.txt")