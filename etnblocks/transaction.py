"""Transaction model and helpers that summarise inputs, outputs, fees and mixins."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, NamedTuple, Union


@dataclass(frozen=True)
class TxInGen:
    """Coinbase input that creates new coins at a given block height."""

    height: int


@dataclass(frozen=True)
class TxInToKey:
    """Input spending a key output, with its ring member offsets and key image."""

    amount: int
    key_offsets: tuple[int, ...] = ()
    k_image: str = ""


@dataclass(frozen=True)
class TxInToKeyPublic:
    """Input spending a public (transparent) output by its transaction hash."""

    amount: int
    tx_hash: str = ""
    relative_offset: int = 0


@dataclass(frozen=True)
class TxOutToKey:
    """Output target given by a one-time public key."""

    key: str


@dataclass(frozen=True)
class TxOutToKeyPublic:
    """Output target given by a public address."""

    address: str


TxIn = Union[TxInGen, TxInToKey, TxInToKeyPublic]
TxOutTarget = Union[TxOutToKey, TxOutToKeyPublic, Any]


@dataclass(frozen=True)
class TxOut:
    """A transaction output: an amount and its target."""

    amount: int
    target: TxOutTarget


@dataclass
class Transaction:
    """A transaction with its inputs, outputs and extra field."""

    version: int = 1
    vin: list[TxIn] = field(default_factory=list)
    vout: list[TxOut] = field(default_factory=list)
    extra: bytes = b""


@dataclass
class Block:
    """A block: timestamp, miner transaction and hashes of its transactions."""

    timestamp: int = 0
    miner_tx: Transaction = field(default_factory=Transaction)
    tx_hashes: list[str] = field(default_factory=list)


@dataclass
class TxSummary:
    """Totals and the classified inputs and outputs of one transaction."""

    sum_outputs: int = 0
    sum_inputs: int = 0
    mixin_no: int = 0
    num_nonrct_inputs: int = 0
    output_pub_keys: list[tuple[TxOutToKey | None, int]] = field(default_factory=list)
    input_key_imgs: list[TxInToKey] = field(default_factory=list)
    output_public: list[tuple[TxOutToKeyPublic, int]] = field(default_factory=list)
    input_public: list[TxInToKeyPublic] = field(default_factory=list)


class JsonTxSummary(NamedTuple):
    """Summary of a transaction given as JSON."""

    sum_outputs: int
    sum_inputs: int
    no_outputs: int
    no_inputs: int
    mixin_no: int
    num_nonrct_inputs: int


def _key_inputs(tx: Transaction) -> Iterable[TxInToKey]:
    return (txin for txin in tx.vin if isinstance(txin, TxInToKey))


def sum_money_in_outputs(tx: Transaction) -> int:
    """Sum the amounts of all outputs."""
    return sum(out.amount for out in tx.vout)


def sum_money_in_inputs(tx: Transaction) -> int:
    """Sum the amounts of the key inputs."""
    return sum(txin.amount for txin in _key_inputs(tx))


def count_nonrct_inputs(tx: Transaction) -> int:
    """Count key inputs that carry a non-zero amount."""
    return sum(1 for txin in _key_inputs(tx) if txin.amount != 0)


def sum_money_in_tx(tx: Transaction) -> tuple[int, int]:
    """Return the input and output totals of a transaction."""
    return sum_money_in_inputs(tx), sum_money_in_outputs(tx)


def sum_money_in_txs(txs: Iterable[Transaction]) -> tuple[int, int]:
    """Return the input and output totals over many transactions."""
    inputs = outputs = 0
    for tx in txs:
        inputs += sum_money_in_inputs(tx)
        outputs += sum_money_in_outputs(tx)
    return inputs, outputs


def get_tx_fee(tx: Transaction) -> int:
    """Return the fee a transaction pays; coinbase transactions pay none.

    Raises ValueError when the outputs spend more than the inputs hold.
    """
    if any(isinstance(txin, TxInGen) for txin in tx.vin):
        return 0
    inputs = sum(
        txin.amount for txin in tx.vin if isinstance(txin, (TxInToKey, TxInToKeyPublic))
    )
    outputs = sum_money_in_outputs(tx)
    if outputs > inputs:
        raise ValueError(f"outputs ({outputs}) exceed inputs ({inputs})")
    return inputs - outputs


def sum_fees_in_txs(txs: Iterable[Transaction]) -> int:
    """Sum the fees of many transactions."""
    return sum(get_tx_fee(tx) for tx in txs)


def get_mixin_no(tx: Transaction) -> int:
    """Return the ring size of the first key input that has ring members."""
    for txin in _key_inputs(tx):
        if txin.key_offsets:
            return len(txin.key_offsets)
    return 0


def get_mixin_no_in_txs(txs: Iterable[Transaction]) -> list[int]:
    """Return the ring size of each transaction."""
    return [get_mixin_no(tx) for tx in txs]


def get_outputs(tx: Transaction) -> list[tuple[TxOutToKey | None, int]]:
    """Return (target, amount) per output; outputs of other kinds give (None, 0)."""
    return [
        (out.target, out.amount) if isinstance(out.target, TxOutToKey) else (None, 0)
        for out in tx.vout
    ]


def get_outputs_tuple(tx: Transaction) -> list[tuple[TxOutToKey, int, int]]:
    """Return (target, amount, index) for each key output."""
    return [
        (out.target, out.amount, index)
        for index, out in enumerate(tx.vout)
        if isinstance(out.target, TxOutToKey)
    ]


def get_key_images(tx: Transaction) -> list[TxInToKey]:
    """Return the key inputs of a transaction."""
    return list(_key_inputs(tx))


def summary_of_in_out(tx: Transaction) -> TxSummary:
    """Classify the inputs and outputs of a transaction and total them."""
    summary = TxSummary()

    for out in tx.vout:
        if isinstance(out.target, TxOutToKey):
            summary.output_pub_keys.append((out.target, out.amount))
            summary.sum_outputs += out.amount
        elif isinstance(out.target, TxOutToKeyPublic):
            summary.output_public.append((out.target, out.amount))
            summary.sum_outputs += out.amount
        else:
            summary.output_pub_keys.append((None, 0))

    for txin in tx.vin:
        if isinstance(txin, TxInToKey):
            summary.sum_inputs += txin.amount
            if txin.amount != 0:
                summary.num_nonrct_inputs += 1
            if summary.mixin_no == 0:
                summary.mixin_no = len(txin.key_offsets)
            summary.input_key_imgs.append(txin)
        elif isinstance(txin, TxInToKeyPublic):
            summary.sum_inputs += txin.amount
            if txin.amount != 0:
                summary.num_nonrct_inputs += 1
            summary.input_public.append(txin)

    return summary


def _load(data: str | Mapping[str, Any]) -> Mapping[str, Any] | None:
    if isinstance(data, str):
        try:
            return json.loads(data)
        except json.JSONDecodeError:
            return None
    return data


def _entries(data: Mapping[str, Any], key: str) -> list[Any]:
    return data.get(key) or []


def sum_money_in_outputs_json(data: str | Mapping[str, Any]) -> tuple[int, int]:
    """Return (total amount, number) of outputs of a JSON transaction.

    An unparsable JSON string gives (0, 0).
    """
    parsed = _load(data)
    if parsed is None:
        return 0, 0
    vout = _entries(parsed, "vout")
    return sum(int(out["amount"]) for out in vout), len(vout)


def sum_money_in_inputs_json(data: str | Mapping[str, Any]) -> tuple[int, int]:
    """Return (total amount, number) of inputs of a JSON transaction.

    An unparsable JSON string gives (0, 0).
    """
    parsed = _load(data)
    if parsed is None:
        return 0, 0
    vin = _entries(parsed, "vin")
    return sum(int(txin["key"]["amount"]) for txin in vin), len(vin)


def count_nonrct_inputs_json(data: str | Mapping[str, Any]) -> int:
    """Count inputs with a non-zero amount in a JSON transaction."""
    parsed = _load(data)
    if parsed is None:
        return 0
    return sum(1 for txin in _entries(parsed, "vin") if int(txin["key"]["amount"]) != 0)


def get_mixin_no_json(data: str | Mapping[str, Any]) -> list[int]:
    """Return a one-element list with the ring size of the first input.

    An unparsable JSON string gives an empty list; a transaction without
    inputs raises IndexError.
    """
    parsed = _load(data)
    if parsed is None:
        return []
    vin = _entries(parsed, "vin")
    if not vin:
        raise IndexError("transaction has no inputs")
    return [len(vin[0]["key"]["key_offsets"])]


def summary_of_in_out_json(data: str | Mapping[str, Any]) -> JsonTxSummary:
    """Summarise a JSON transaction, as given for pool transactions.

    The mixin number is the ring size of the first input less one.
    Raises ValueError for unparsable JSON and IndexError without inputs.
    """
    parsed = _load(data)
    if parsed is None:
        raise ValueError("transaction JSON cannot be parsed")
    vout = _entries(parsed, "vout")
    vin = _entries(parsed, "vin")
    if not vin:
        raise IndexError("transaction has no inputs")

    amounts = [int(txin["key"]["amount"]) for txin in vin]
    return JsonTxSummary(
        sum_outputs=sum(int(out["amount"]) for out in vout),
        sum_inputs=sum(amounts),
        no_outputs=len(vout),
        no_inputs=len(vin),
        mixin_no=len(vin[0]["key"]["key_offsets"]) - 1,
        num_nonrct_inputs=sum(1 for amount in amounts if amount != 0),
    )