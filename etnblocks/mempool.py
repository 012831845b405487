"""Cached view of the transaction pool and of the daemon's network state."""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Protocol

from etnblocks.formatting import (
    etn_amount_to_str,
    get_etn,
    make_difficulty,
    split_difficulty,
    timestamp_to_str_gm,
)
from etnblocks.paths import NetworkType
from etnblocks.rpc import STATUS_BUSY, STATUS_OK
from etnblocks.transaction import Transaction, summary_of_in_out

logger = logging.getLogger(__name__)

FEE_ESTIMATE_GRACE_BLOCKS = 10
DEFAULT_REFRESH_TIME = 10
NETWORK_INFO_PERIOD = 60

_SIZE_STR_LENGTH = 9


def status_to_uint(status: str) -> int:
    """Map a daemon status string to 1 (OK), 2 (BUSY) or 0 (anything else)."""
    if status == STATUS_OK:
        return 1
    if status == STATUS_BUSY:
        return 2
    return 0


def status_to_string(status: int) -> str:
    """Map 1 and 2 back to their daemon status strings.

    Raises ValueError for any other value.
    """
    if status == 1:
        return STATUS_OK
    if status == 2:
        return STATUS_BUSY
    raise ValueError(f"no status string for {status}")


@dataclass(frozen=True)
class NetworkInfo:
    """Network state as last read from the daemon."""

    status: int = 0
    height: int = 0
    target_height: int = 0
    difficulty: int = 0
    difficulty_top64: int = 0
    target: int = 0
    tx_count: int = 0
    tx_pool_size: int = 0
    alt_blocks_count: int = 0
    outgoing_connections_count: int = 0
    incoming_connections_count: int = 0
    white_peerlist_size: int = 0
    grey_peerlist_size: int = 0
    nettype: NetworkType = NetworkType.MAINNET
    top_block_hash: str = ""
    cumulative_difficulty: int = 0
    cumulative_difficulty_top64: int = 0
    block_size_limit: int = 0
    block_size_median: int = 0
    block_weight_limit: int = 0
    block_size_limit_str: str = ""
    block_size_median_str: str = ""
    start_time: int = 0
    current_hf_version: int = 0
    hash_rate: int = 0
    hash_rate_top64: int = 0
    fee_per_kb: int = 0
    info_timestamp: int = 0
    current: bool = False


@dataclass(frozen=True)
class PoolTxInfo:
    """A transaction as the pool holds it, with its size, fee and arrival time."""

    tx_hash: str
    tx: Transaction
    blob_size: int
    fee: int
    receive_time: int


@dataclass
class MempoolTx:
    """A pool transaction with the values shown on the front page."""

    tx_hash: str
    tx: Transaction = field(default_factory=Transaction)
    receive_time: int = 0
    sum_inputs: int = 0
    sum_outputs: int = 0
    no_inputs: int = 0
    no_outputs: int = 0
    num_nonrct_inputs: int = 0
    mixin_no: int = 0
    fee_str: str = ""
    fee_micro_str: str = ""
    payed_for_kB_str: str = ""
    payed_for_kB_micro_str: str = ""
    etn_inputs_str: str = ""
    etn_outputs_str: str = ""
    timestamp_str: str = ""
    txsize: str = ""


class _PoolSource(Protocol):
    def get_pool_transactions(self) -> Iterable[PoolTxInfo]:
        ...


class _Rpc(Protocol):
    def get_network_info(self) -> Mapping[str, Any]:
        ...

    def get_dynamic_per_kb_fee_estimate(self, grace_blocks: int) -> int:
        ...

    def get_hardfork_info(self) -> Mapping[str, Any]:
        ...


def _int(info: Mapping[str, Any], key: str) -> int:
    value = info.get(key) or 0
    return int(value, 0) if isinstance(value, str) else int(value)


def _wide_difficulty(info: Mapping[str, Any]) -> int:
    wide = info.get("wide_difficulty")
    if isinstance(wide, str) and wide:
        return int(wide, 0)
    if isinstance(wide, int):
        return wide
    return make_difficulty(_int(info, "difficulty"), _int(info, "difficulty_top64"))


def _make_mempool_tx(info: PoolTxInfo) -> MempoolTx:
    tx = info.tx
    summary = summary_of_in_out(tx)

    tx_size = info.blob_size / 1024.0
    payed_for_kb = get_etn(info.fee) / tx_size if tx_size else math.inf

    return MempoolTx(
        tx_hash=info.tx_hash,
        tx=tx,
        receive_time=info.receive_time,
        sum_outputs=summary.sum_outputs,
        sum_inputs=summary.sum_inputs,
        no_outputs=len(summary.output_public if tx.version >= 2 else summary.output_pub_keys),
        no_inputs=len(summary.input_public if tx.version >= 3 else summary.input_key_imgs),
        mixin_no=summary.mixin_no,
        num_nonrct_inputs=summary.num_nonrct_inputs,
        fee_str=etn_amount_to_str(info.fee, "{:0.2f}", False),
        fee_micro_str=etn_amount_to_str(info.fee, "{:0.2f}", False),
        payed_for_kB_str="{:0.2f}".format(payed_for_kb),
        payed_for_kB_micro_str="{:02.0f}".format(payed_for_kb * 1e6),
        etn_inputs_str=etn_amount_to_str(summary.sum_inputs, "{:0.2f}"),
        etn_outputs_str=etn_amount_to_str(summary.sum_outputs, "{:0.2f}"),
        timestamp_str=timestamp_to_str_gm(info.receive_time),
        txsize="{:0.2f}".format(tx_size),
    )


class MempoolStatus:
    """Keeps the pool transactions and network info fresh in a background thread."""

    def __init__(
        self,
        rpc: _Rpc,
        pool_source: _PoolSource,
        refresh_time: int = DEFAULT_REFRESH_TIME,
    ) -> None:
        self.rpc = rpc
        self.pool_source = pool_source
        self.refresh_time = max(1, int(refresh_time))
        self._lock = threading.Lock()
        self._txs: list[MempoolTx] = []
        self._mempool_no = 0
        self._mempool_size = 0
        self._network_info = NetworkInfo()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def mempool_no(self) -> int:
        """Number of transactions in the pool at the last read."""
        with self._lock:
            return self._mempool_no

    @property
    def mempool_size(self) -> int:
        """Total size in bytes of the pool transactions at the last read."""
        with self._lock:
            return self._mempool_size

    @property
    def current_network_info(self) -> NetworkInfo:
        """The network info last read, possibly marked as not current."""
        with self._lock:
            return self._network_info

    def read_mempool(self) -> list[MempoolTx]:
        """Read the pool, newest first, and replace the cached transactions.

        The cache changes only once the whole pool has been read; errors
        from the pool source propagate and leave the cache as it was.
        """
        pool = sorted(
            self.pool_source.get_pool_transactions(),
            key=lambda info: info.receive_time,
            reverse=True,
        )
        txs = [_make_mempool_tx(info) for info in pool]
        size = sum(info.blob_size for info in pool)

        with self._lock:
            self._mempool_no = len(txs)
            self._mempool_size = size
            self._txs = txs
        return list(txs)

    def read_network_info(self) -> NetworkInfo:
        """Query the daemon and replace the cached network info.

        Errors from the daemon propagate and leave the cache as it was.
        """
        info = self.rpc.get_network_info()
        fee_estimated = self.rpc.get_dynamic_per_kb_fee_estimate(FEE_ESTIMATE_GRACE_BLOCKS)
        hardfork = self.rpc.get_hardfork_info()

        target = _int(info, "target")
        if target == 0:
            raise ValueError("network info has a zero target block time")
        hash_rate, hash_rate_top64 = split_difficulty(_wide_difficulty(info) // target)

        if info.get("testnet"):
            nettype = NetworkType.TESTNET
        elif info.get("stagenet"):
            nettype = NetworkType.STAGENET
        else:
            nettype = NetworkType.MAINNET

        block_size_limit = _int(info, "block_size_limit")
        block_size_median = _int(info, "block_size_median")

        network_info = NetworkInfo(
            status=status_to_uint(str(info.get("status", ""))),
            height=_int(info, "height"),
            target_height=_int(info, "target_height"),
            difficulty=_int(info, "difficulty"),
            difficulty_top64=_int(info, "difficulty_top64"),
            target=target,
            hash_rate=hash_rate,
            hash_rate_top64=hash_rate_top64,
            tx_count=_int(info, "tx_count"),
            tx_pool_size=_int(info, "tx_pool_size"),
            alt_blocks_count=_int(info, "alt_blocks_count"),
            outgoing_connections_count=_int(info, "outgoing_connections_count"),
            incoming_connections_count=_int(info, "incoming_connections_count"),
            white_peerlist_size=_int(info, "white_peerlist_size"),
            nettype=nettype,
            cumulative_difficulty=_int(info, "cumulative_difficulty"),
            cumulative_difficulty_top64=_int(info, "cumulative_difficulty_top64"),
            block_size_limit=block_size_limit,
            block_size_median=block_size_median,
            block_weight_limit=_int(info, "block_weight_limit"),
            start_time=_int(info, "start_time"),
            block_size_limit_str="{:0.2f}".format(block_size_limit / 2.0 / 1024.0)[
                :_SIZE_STR_LENGTH
            ],
            block_size_median_str="{:0.2f}".format(block_size_median / 1024.0)[
                :_SIZE_STR_LENGTH
            ],
            top_block_hash=str(info.get("top_block_hash", "")),
            fee_per_kb=int(fee_estimated),
            info_timestamp=int(time.time()),
            current_hf_version=_int(hardfork, "version"),
            current=True,
        )

        with self._lock:
            self._network_info = network_info
        return network_info

    def get_mempool_txs(self, limit: int | None = None) -> list[MempoolTx]:
        """Return a copy of the cached pool transactions, at most ``limit`` of them."""
        with self._lock:
            if limit is None:
                return list(self._txs)
            if limit < 0:
                raise ValueError("limit must not be negative")
            return self._txs[:limit]

    def _mark_network_info_stale(self) -> None:
        with self._lock:
            self._network_info = replace(self._network_info, current=False)

    def _run(self) -> None:
        loop_index = 0
        divider = max(1, NETWORK_INFO_PERIOD // self.refresh_time)

        while not self._stop.is_set():
            if loop_index % divider == 0:
                try:
                    self.read_network_info()
                except Exception:
                    logger.error("Cant read network info", exc_info=True)
                    self._mark_network_info_stale()
                else:
                    logger.info("Current network info read")
                    loop_index = 0

            try:
                txs = self.read_mempool()
            except Exception:
                logger.exception("Getting mempool failed")
            else:
                logger.info("mempool status txs: %d", len(txs))

            self._stop.wait(self.refresh_time)
            loop_index += 1
        logger.info("Mempool status thread interrupted.")

    def start(self) -> None:
        """Start refreshing in the background; does nothing if already running."""
        if self.is_running():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="mempool-status", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop refreshing and wait for the background thread to end."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def is_running(self) -> bool:
        """Tell whether the background refresh is running."""
        return self._thread is not None and self._thread.is_alive()