"""JSON client for the node daemon's RPC interface."""

from __future__ import annotations

import json
import re
import threading
import urllib.error
import urllib.request
from typing import Any

DEFAULT_DAEMON_URL = "http:://127.0.0.1:26968"
DEFAULT_TIMEOUT_MS = 200000

STATUS_OK = "OK"
STATUS_BUSY = "BUSY"
STATUS_FAILED = "Failed"

BUSY_MESSAGE = "daemon is busy. Please try again later."
ALT_BLOCKS_FAILED_MESSAGE = "daemon rpc failed. Please try again later."

_SCHEME = re.compile(r"^([A-Za-z][A-Za-z0-9+.-]*):+//")


class RpcError(Exception):
    """Raised when a daemon call fails or the daemon reports an error."""


def _normalise_url(url: str) -> str:
    url = url.strip()
    if _SCHEME.match(url):
        url = _SCHEME.sub(r"\1://", url, count=1)
    else:
        url = "http://" + url
    return url.rstrip("/")


class RpcClient:
    """Talks to a daemon over HTTP with JSON bodies; calls are serialised."""

    def __init__(
        self,
        daemon_url: str = DEFAULT_DAEMON_URL,
        timeout: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        self.daemon_url = daemon_url
        self.timeout_ms = timeout
        self._base_url = _normalise_url(daemon_url)
        self._lock = threading.Lock()

    def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        request = urllib.request.Request(
            self._base_url + path,
            data=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        try:
            with self._lock, urllib.request.urlopen(
                request, timeout=self.timeout_ms / 1000
            ) as response:
                body = json.loads(response.read().decode("utf-8"))
        except (OSError, ValueError) as exc:
            raise RpcError(f"Error connecting to daemon at {self.daemon_url}") from exc
        if not isinstance(body, dict):
            raise RpcError(f"Unexpected response from daemon at {self.daemon_url}")
        return body

    @staticmethod
    def _check_status(status: Any, other_message: str | None = None) -> None:
        if status == STATUS_BUSY:
            raise RpcError(f"Error connecting to daemon due to {BUSY_MESSAGE}")
        if status not in (STATUS_OK, "", None):
            reason = other_message if other_message is not None else str(status)
            raise RpcError(f"Error connecting to daemon due to {reason}")

    def _json_rpc(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"jsonrpc": "2.0", "id": 0, "method": method}
        if params is not None:
            payload["params"] = params
        response = self._post("/json_rpc", payload)
        if "error" in response:
            error = response["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise RpcError(f"Daemon returned an error for {method}: {message}")
        result = response.get("result") or {}
        self._check_status(result.get("status"))
        return result

    def get_current_height(self) -> int:
        """Return the daemon's current blockchain height."""
        response = self._post("/getheight", {})
        try:
            return int(response["height"])
        except (KeyError, TypeError, ValueError) as exc:
            raise RpcError(f"No height in response from {self.daemon_url}") from exc

    def get_mempool(self) -> list[dict[str, Any]]:
        """Return the pool transactions, newest first."""
        response = self._post("/get_transaction_pool", {})
        if response.get("status") != STATUS_OK:
            raise RpcError(f"Error connecting to daemon at {self.daemon_url}")
        transactions = list(response.get("transactions") or [])
        return sorted(transactions, key=lambda tx: tx.get("receive_time", 0), reverse=True)

    def commit_tx(self, tx_hex: str) -> dict[str, Any]:
        """Send a serialised transaction, given as hex, to the daemon for relay."""
        response = self._post(
            "/sendrawtransaction", {"tx_as_hex": tx_hex, "do_not_relay": False}
        )
        if response.get("status") == STATUS_FAILED:
            raise RpcError(f"Error sending tx: {response.get('reason', '')}")
        return response

    def get_network_info(self) -> dict[str, Any]:
        """Return the daemon's network information."""
        return self._json_rpc("get_info")

    def get_hardfork_info(self) -> dict[str, Any]:
        """Return the daemon's hard fork information."""
        return self._json_rpc("hard_fork_info")

    def get_dynamic_per_kb_fee_estimate(self, grace_blocks: int) -> int:
        """Return the fee per kB estimated to stay valid for ``grace_blocks`` blocks."""
        result = self._json_rpc("get_fee_estimate", {"grace_blocks": grace_blocks})
        try:
            return int(result["fee"])
        except (KeyError, TypeError, ValueError) as exc:
            raise RpcError("No fee in fee estimate response") from exc

    def get_alt_blocks(self) -> list[str]:
        """Return the hashes of the alternative blocks the daemon knows of."""
        response = self._post("/get_alt_blocks_hashes", {})
        self._check_status(response.get("status"), ALT_BLOCKS_FAILED_MESSAGE)
        return list(response.get("blks_hashes") or [])

    def get_block(self, blk_hash: str) -> bytes:
        """Return the serialised block with the given hash."""
        result = self._json_rpc("getblock", {"hash": blk_hash})
        blob = result.get("blob")
        if not isinstance(blob, str):
            raise RpcError(f"No block blob for {blk_hash}")
        try:
            return bytes.fromhex(blob)
        except ValueError as exc:
            raise RpcError(f"Block blob for {blk_hash} is not valid hex") from exc