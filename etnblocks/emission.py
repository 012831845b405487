"""Tracking of the total coin emission and fees over the blockchain."""

from __future__ import annotations

import logging
import os
import re
import threading
from collections.abc import Sequence
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Protocol

from etnblocks.paths import read_file
from etnblocks.transaction import Block, Transaction, get_tx_fee, sum_money_in_outputs

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_FILE = "emission_amount.txt"
DEFAULT_CHUNK_SIZE = 10000
DEFAULT_CHUNK_GAP = 3

_NUMBER = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class Emission:
    """Coins created by mining and fees paid, up to (not including) ``blk_no``."""

    coinbase: int = 0
    fee: int = 0
    blk_no: int = 0

    def checksum(self) -> int:
        """Return the checksum stored alongside the values."""
        return self.coinbase + self.fee + self.blk_no

    def __str__(self) -> str:
        return f"{self.blk_no},{self.coinbase},{self.fee},{self.checksum()}"


class EmissionFileError(Exception):
    """Raised when stored emission data is missing, malformed or corrupted."""


class BlockchainSource(Protocol):
    """Read access to the blockchain that the emission monitor needs."""

    def get_current_blockchain_height(self) -> int:
        """Return the number of blocks in the chain."""
        ...

    def get_block_by_height(self, height: int) -> Block:
        """Return the block at the given height."""
        ...

    def get_transactions(self, tx_hashes: Sequence[str]) -> list[Transaction]:
        """Return the transactions found for the given hashes."""
        ...


def parse_emission(text: str) -> Emission:
    """Parse the stored form "blk_no,coinbase,fee,checksum".

    Raises EmissionFileError when the text is malformed or the checksum fails.
    """
    cleaned = text.rstrip(" \n\r\t")
    if not cleaned:
        raise EmissionFileError("emission data is empty")

    fields = cleaned.split(",")
    if len(fields) < 4:
        raise EmissionFileError(f"emission data has too few fields: {cleaned!r}")

    numbers = []
    for value in fields[:4]:
        if not _NUMBER.fullmatch(value):
            raise EmissionFileError(f"Cant parse to number data from string: {cleaned!r}")
        numbers.append(int(value))

    blk_no, coinbase, fee, read_checksum = numbers
    emission = Emission(coinbase=coinbase, fee=fee, blk_no=blk_no)
    if read_checksum != emission.checksum():
        raise EmissionFileError(
            f"read checksum != checksum: {read_checksum} != {emission.checksum()}"
        )
    return emission


class EmissionMonitor:
    """Scans the blockchain in chunks in the background and keeps the emission total.

    The top ``chunk_gap`` blocks are never stored, since they may still be
    reorganised; :meth:`get_emission` adds them on the fly.
    """

    catch_up_pause: float = 1.0
    top_pause: float = 60.0

    def __init__(
        self,
        source: BlockchainSource,
        blockchain_path: str | os.PathLike[str],
        output_file: str = DEFAULT_OUTPUT_FILE,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_gap: int = DEFAULT_CHUNK_GAP,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if chunk_gap < 0:
            raise ValueError("chunk_gap must not be negative")
        self.source = source
        self.blockchain_path = Path(blockchain_path)
        self.output_file = output_file
        self.chunk_size = chunk_size
        self.chunk_gap = chunk_gap
        self.current_height = 0
        self._emission = Emission()
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def total_emission(self) -> Emission:
        """The emission stored so far, without the top gap blocks."""
        with self._lock:
            return self._emission

    def output_file_path(self) -> Path:
        """Return where the emission is saved."""
        return self.blockchain_path / self.output_file

    def calculate_emission_in_blocks(self, start_blk: int, end_blk: int) -> Emission:
        """Compute the emission of blocks in [start_blk, end_blk)."""
        coinbase = fee = 0
        height = start_blk
        while height < end_blk:
            block = self.source.get_block_by_height(height)
            coinbase_amount = sum_money_in_outputs(block.miner_tx)
            txs = self.source.get_transactions(block.tx_hashes)
            tx_fee_amount = sum(get_tx_fee(tx) for tx in txs)
            coinbase += coinbase_amount - tx_fee_amount
            fee += tx_fee_amount
            height += 1
        return Emission(coinbase=coinbase, fee=fee, blk_no=height)

    def update_current_emission_amount(self) -> Emission:
        """Scan the next chunk of blocks and add it to the stored total."""
        self.current_height = self.source.get_current_blockchain_height()
        current = self.total_emission

        end_block = current.blk_no + self.chunk_size
        if end_block > self.current_height:
            end_block = max(0, self.current_height - self.chunk_gap)

        calculated = self.calculate_emission_in_blocks(current.blk_no, end_block)
        updated = Emission(
            coinbase=current.coinbase + calculated.coinbase,
            fee=current.fee + calculated.fee,
            blk_no=calculated.blk_no,
        )
        with self._lock:
            self._emission = updated
        return updated

    def save_current_emission_amount(self) -> Path:
        """Write the stored total to the output file and return its path."""
        path = self.output_file_path()
        path.write_text(str(self.total_emission), encoding="utf-8")
        return path

    def load_current_emission_amount(self) -> Emission:
        """Read the stored total from the output file.

        Raises EmissionFileError when the file is missing, empty or corrupted.
        """
        path = self.output_file_path()
        try:
            text = read_file(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise EmissionFileError(f"Couldn't open file: {path}") from exc
        emission = parse_emission(text)
        with self._lock:
            self._emission = emission
        return emission

    def get_emission(self) -> Emission:
        """Return the stored total with the top gap blocks added."""
        current = self.total_emission
        height = self.current_height
        start_blk = current.blk_no
        end_block = start_blk + self.chunk_gap

        if end_block >= height and start_blk < height:
            end_block = min(end_block, height)
            gap = self.calculate_emission_in_blocks(start_blk, end_block)
            current = replace(
                current,
                coinbase=current.coinbase + gap.coinbase,
                fee=current.fee + gap.fee,
                blk_no=gap.blk_no if gap.blk_no > 0 else current.blk_no,
            )
        return current

    def _run(self) -> None:
        while not self._stop.is_set():
            before = self.total_emission
            try:
                self.update_current_emission_amount()
                self.save_current_emission_amount()
            except Exception:
                logger.exception("Emission update failed")
            logger.info("current emission: %s", before)

            if before.blk_no < self.current_height - self.chunk_size:
                pause = self.catch_up_pause
            else:
                pause = self.top_pause
            self._stop.wait(pause)
        logger.info("Emission monitoring thread interrupted.")

    def start(self) -> None:
        """Start the background scan, resuming from the saved file if present.

        Raises EmissionFileError when the saved file cannot be used.
        """
        if self.is_running():
            return
        with self._lock:
            self._emission = Emission()
        if self.output_file_path().exists():
            self.load_current_emission_amount()

        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="emission-monitor", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop the background scan and wait for it to finish."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def is_running(self) -> bool:
        """Tell whether the background scan is running."""
        return self._thread is not None and self._thread.is_alive()