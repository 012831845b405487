import json

import pytest

from etnblocks.transaction import (
    Block,
    Transaction,
    TxInGen,
    TxInToKey,
    TxInToKeyPublic,
    TxOut,
    TxOutToKey,
    TxOutToKeyPublic,
    count_nonrct_inputs,
    count_nonrct_inputs_json,
    get_key_images,
    get_mixin_no,
    get_mixin_no_in_txs,
    get_mixin_no_json,
    get_outputs,
    get_outputs_tuple,
    get_tx_fee,
    sum_fees_in_txs,
    sum_money_in_inputs,
    sum_money_in_inputs_json,
    sum_money_in_outputs,
    sum_money_in_outputs_json,
    sum_money_in_tx,
    sum_money_in_txs,
    summary_of_in_out,
    summary_of_in_out_json,
)


def make_tx():
    return Transaction(
        version=1,
        vin=[
            TxInToKey(amount=700, key_offsets=(1, 2, 3), k_image="ki1"),
            TxInToKey(amount=0, key_offsets=(4, 5, 6), k_image="ki2"),
            TxInToKeyPublic(amount=300, tx_hash="aa", relative_offset=0),
        ],
        vout=[
            TxOut(amount=400, target=TxOutToKey(key="k1")),
            TxOut(amount=500, target=TxOutToKeyPublic(address="addr")),
            TxOut(amount=0, target="script"),
        ],
    )


def test_single_output_sum():
    tx = Transaction(vout=[TxOut(amount=500, target=TxOutToKey(key="k"))])
    assert sum_money_in_outputs(tx) == 500


def test_inputs_only_count_key_inputs():
    tx = make_tx()
    key_only = Transaction(vin=[txin for txin in tx.vin if isinstance(txin, TxInToKey)])
    assert sum_money_in_inputs(tx) == sum_money_in_inputs(key_only)
    assert sum_money_in_inputs(Transaction(vin=[TxInToKeyPublic(amount=300)])) == 0


def test_count_nonrct_inputs():
    tx = make_tx()
    assert count_nonrct_inputs(tx) == 1


def test_sum_money_in_tx_matches_parts():
    tx = make_tx()
    assert sum_money_in_tx(tx) == (sum_money_in_inputs(tx), sum_money_in_outputs(tx))


def test_sum_money_in_txs_adds_up():
    tx = make_tx()
    single = sum_money_in_tx(tx)
    assert sum_money_in_txs([tx, tx]) == (single[0] * 2, single[1] * 2)
    assert sum_money_in_txs([]) == (0, 0)


def test_coinbase_fee_is_zero():
    miner_tx = Transaction(vin=[TxInGen(height=10)], vout=[TxOut(1000, TxOutToKey("k"))])
    assert get_tx_fee(miner_tx) == 0


def test_fee_and_outputs_reconstruct_inputs():
    tx = make_tx()
    fee = get_tx_fee(tx)
    total_in = sum(txin.amount for txin in tx.vin)
    assert fee + sum_money_in_outputs(tx) == total_in
    assert sum_fees_in_txs([tx, tx]) == 2 * fee


def test_fee_overspend_raises():
    tx = Transaction(vin=[TxInToKey(amount=1)], vout=[TxOut(5, TxOutToKey("k"))])
    with pytest.raises(ValueError):
        get_tx_fee(tx)


def test_mixin_no_takes_first_non_empty_ring():
    tx = Transaction(
        vin=[TxInToKeyPublic(amount=1), TxInToKey(amount=0), TxInToKey(amount=0, key_offsets=(9, 8))]
    )
    assert get_mixin_no(tx) == 2
    assert get_mixin_no(Transaction()) == 0
    assert get_mixin_no_in_txs([tx, Transaction()]) == [2, 0]


def test_get_outputs_empty_pair_for_other_targets():
    tx = make_tx()
    outputs = get_outputs(tx)
    assert len(outputs) == len(tx.vout)
    assert outputs[0] == (TxOutToKey(key="k1"), 400)
    assert outputs[1] == (None, 0)
    assert outputs[2] == (None, 0)


def test_get_outputs_tuple_keeps_index():
    tx = Transaction(
        vout=[
            TxOut(1, TxOutToKeyPublic("a")),
            TxOut(2, TxOutToKey("k")),
        ]
    )
    assert get_outputs_tuple(tx) == [(TxOutToKey("k"), 2, 1)]


def test_get_key_images():
    tx = make_tx()
    images = get_key_images(tx)
    assert [txin.k_image for txin in images] == ["ki1", "ki2"]


def test_summary_of_in_out():
    tx = make_tx()
    summary = summary_of_in_out(tx)
    assert summary.sum_outputs == sum(out.amount for out in tx.vout)
    assert summary.sum_inputs == sum(txin.amount for txin in tx.vin)
    assert summary.mixin_no == 3
    assert summary.num_nonrct_inputs == 2
    assert summary.output_pub_keys == [(TxOutToKey("k1"), 400), (None, 0)]
    assert summary.output_public == [(TxOutToKeyPublic("addr"), 500)]
    assert len(summary.input_key_imgs) == 2
    assert summary.input_public == [tx.vin[2]]


def test_block_defaults_hold_empty_miner_tx():
    blk = Block(timestamp=5, tx_hashes=["h"])
    assert sum_money_in_outputs(blk.miner_tx) == 0
    assert blk.tx_hashes == ["h"]


JSON_TX = {
    "vout": [{"amount": 400}, {"amount": 600}],
    "vin": [
        {"key": {"amount": 0, "key_offsets": [1, 2, 3, 4]}},
        {"key": {"amount": 250, "key_offsets": [5, 6, 7, 8]}},
    ],
}


def test_json_sums_from_dict_and_string_agree():
    text = json.dumps(JSON_TX)
    assert sum_money_in_outputs_json(JSON_TX) == sum_money_in_outputs_json(text)
    assert sum_money_in_inputs_json(JSON_TX) == sum_money_in_inputs_json(text)
    assert sum_money_in_inputs_json(JSON_TX) == (250, 2)


def test_json_outputs_count():
    total, count = sum_money_in_outputs_json(JSON_TX)
    assert count == len(JSON_TX["vout"])
    assert total == sum(out["amount"] for out in JSON_TX["vout"])


def test_json_invalid_string_gives_empty_results():
    assert sum_money_in_outputs_json("not json") == (0, 0)
    assert sum_money_in_inputs_json("{") == (0, 0)
    assert count_nonrct_inputs_json("{") == 0
    assert get_mixin_no_json("nope") == []


def test_json_count_nonrct_and_mixin():
    assert count_nonrct_inputs_json(JSON_TX) == 1
    assert get_mixin_no_json(json.dumps(JSON_TX)) == [4]


def test_json_mixin_without_inputs_raises():
    with pytest.raises(IndexError):
        get_mixin_no_json({"vin": []})


def test_summary_json():
    summary = summary_of_in_out_json(JSON_TX)
    assert summary.no_outputs == 2
    assert summary.no_inputs == 2
    assert summary.mixin_no == len(JSON_TX["vin"][0]["key"]["key_offsets"]) - 1
    assert summary.num_nonrct_inputs == 1
    assert summary.sum_inputs == 250


def test_summary_json_errors():
    with pytest.raises(ValueError):
        summary_of_in_out_json("{broken")
    with pytest.raises(IndexError):
        summary_of_in_out_json({"vout": [], "vin": []})