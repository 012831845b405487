# etnblocks

Pieces for building an Electroneum blockchain explorer in Python.
The package uses only the standard library.

## What is inside

| Module | Purpose |
| --- | --- |
| `etnblocks.formatting` | Amounts in ETN, UTC timestamps, time differences, text time axes, hash-rate prefixes, 128-bit difficulty values |
| `etnblocks.webutil` | URL decoding, form-body parsing, character filtering, chunking and medians |
| `etnblocks.transaction` | Transaction, input and output records, plus the sums, fees and counts an explorer shows, from objects or from daemon JSON |
| `etnblocks.paths` | `NetworkType`, the default data and LMDB folders, checking a blockchain path, reading a text file |
| `etnblocks.routeutil` | Base64 encoding and typed route-pattern tags such as `/tx/<string>` |
| `etnblocks.options` | The explorer's command-line options (`CmdLineOptions`, `build_parser`) |
| `etnblocks.rpc` | `RpcClient`, a JSON/HTTP client for the daemon: height, pool, network and hard-fork info, fee estimate, alternative blocks, raw blocks, sending a transaction |
| `etnblocks.emission` | `EmissionMonitor`: total coin emission, scanned chunk by chunk and saved to a checksummed file |
| `etnblocks.mempool` | `MempoolStatus`: a cached, periodically refreshed view of the transaction pool and of the network |

## Installing

Install the project with your usual Python packaging tool. The `test`
extra brings in pytest.

## Examples

Amounts are held in atomic units, 100 to one ETN:

```python
from etnblocks.formatting import etn_amount_to_str, get_etn

get_etn(150)                                # 1.5
etn_amount_to_str(12345, "{:0.2f}", True)   # "123.45"
etn_amount_to_str(0, "{:0.2f}", True)       # "?": zero is shown as unknown
```

Time helpers:

```python
from etnblocks.formatting import timestamp_difference, timestamp_to_str_gm

years, days, hours, minutes, seconds = timestamp_difference(t1, t2)
timestamp_to_str_gm(1500000000, "%Y-%m-%d")
```

Form bodies sent by a browser:

```python
from etnblocks.webutil import parse_post_data, url_decode

url_decode("a%20b+c")                        # "a b c"
parse_post_data("txhash=abc&viewkey=def")    # {"txhash": "abc", "viewkey": "def"}
```

`url_decode` raises `ValueError` on a truncated or malformed escape;
`parse_post_data` then returns an empty dict.

Command-line options, with the explorer's defaults:

```python
from etnblocks.options import CmdLineOptions

options = CmdLineOptions(["--port", "8082", "--testnet"])
options.get_option("port")       # "8082"
options.get_option("testnet")    # True
options.get_option("bindaddr")   # "0.0.0.0"
```

Unknown options or values of the wrong kind raise `ValueError`.

Talking to a daemon:

```python
from etnblocks.rpc import RpcClient, RpcError

client = RpcClient("http://127.0.0.1:26968", 200000)   # timeout in milliseconds
try:
    info = client.get_network_info()
except RpcError as exc:
    print("daemon unavailable:", exc)
```

Every failed call, and every status of `BUSY` or another error from the
daemon, raises `RpcError`.

## Emission and pool monitoring

`EmissionMonitor` reads blocks through an object that follows the
`BlockchainSource` protocol (`get_current_blockchain_height`,
`get_block_by_height`, `get_transactions`). It scans `chunk_size` blocks
at a time in a background thread between `start()` and `stop()` and
writes its progress as `blk_no,coinbase,fee,checksum` to `output_file`
inside the blockchain folder. On `start()` it resumes from that file if
present; a corrupted file raises `EmissionFileError`. The newest
`chunk_gap` blocks are never stored; `get_emission()` adds them on each
call.

`MempoolStatus` takes an RPC client and a pool source whose
`get_pool_transactions()` yields `PoolTxInfo` records. It refreshes the
pool every `refresh_time` seconds and the network info about once a
minute; `get_mempool_txs(limit)` returns the newest transactions first,
and `current_network_info` holds the last `NetworkInfo` read, marked as
not current when a refresh fails.

## What the package does not do

- It has no command to run and no web server: there are no pages,
  templates or HTTP routes, only the helpers such a site would use.
  `CmdLineOptions` parses options but starts nothing.
- It does not open a blockchain database. Blocks, transactions and pool
  contents come from the `BlockchainSource` and pool source objects you
  supply.
- It does not parse or validate binary transactions or blocks, and does
  no cryptography: `RpcClient.get_block` returns the raw block bytes.

## Running the tests

Install the `test` extra and run pytest from the project root.