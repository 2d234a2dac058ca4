"""Tests for the full node JSON-RPC client."""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from addrindex.config.settings import NodeConfig
from addrindex.errors import NodeError
from addrindex.metrics.collector import ExplorerMetrics
from addrindex.node.client import NodeClient


def _config(**kwargs) -> NodeConfig:
    return NodeConfig(host="node.test:8332", **kwargs)


class TestNodeClientLifecycle:
    async def test_connect_and_close(self, fake_node) -> None:
        client = NodeClient(_config(), transport=fake_node.transport())
        assert client.is_connected is False
        await client.connect()
        assert client.is_connected is True
        await client.close()
        assert client.is_connected is False

    async def test_call_before_connect(self) -> None:
        client = NodeClient(_config())
        with pytest.raises(NodeError, match="not connected") as exc_info:
            await client.get_block_count()
        assert exc_info.value.status_code == 500


class TestNodeClientWire:
    async def test_payload_and_auth(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"result": 812345, "error": None, "id": 1})

        client = NodeClient(
            _config(user="rpc", password="secret"), transport=httpx.MockTransport(handler)
        )
        await client.connect()
        try:
            assert await client.get_block_count() == 812345
            await client.get_block_count()
        finally:
            await client.close()

        first = json.loads(seen[0].content)
        second = json.loads(seen[1].content)
        assert first == {"jsonrpc": "1.0", "id": 1, "method": "getblockcount", "params": []}
        assert second["id"] == 2
        assert seen[0].method == "POST"
        assert str(seen[0].url) == "http://node.test:8332/"
        expected = "Basic " + base64.b64encode(b"rpc:secret").decode()
        assert seen[0].headers["authorization"] == expected

    async def test_no_auth_without_user(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"result": 1, "error": None, "id": 1})

        client = NodeClient(_config(), transport=httpx.MockTransport(handler))
        await client.connect()
        await client.get_block_count()
        await client.close()
        assert "authorization" not in seen[0].headers

    def test_ssl_uses_https(self) -> None:
        assert _config(ssl=True).url == "https://node.test:8332"


class TestNodeClientErrors:
    async def test_rpc_error_object(self, fake_node) -> None:
        fake_node.errors["getrawtransaction"] = "No such mempool or blockchain transaction"
        client = NodeClient(_config(), transport=fake_node.transport())
        await client.connect()
        with pytest.raises(NodeError) as exc_info:
            await client.get_raw_transaction("ab" * 32)
        assert exc_info.value.message == "getrawtransaction failed"
        assert exc_info.value.error == "No such mempool or blockchain transaction"
        await client.close()

    async def test_unknown_method(self, fake_node) -> None:
        client = NodeClient(_config(), transport=fake_node.transport())
        await client.connect()
        with pytest.raises(NodeError, match="getinfo failed") as exc_info:
            await client.get_info()
        assert exc_info.value.error == "Method not found"
        await client.close()

    async def test_non_json_reply(self) -> None:
        transport = httpx.MockTransport(lambda r: httpx.Response(401, text="Unauthorized"))
        client = NodeClient(_config(), transport=transport)
        await client.connect()
        with pytest.raises(NodeError) as exc_info:
            await client.get_block_count()
        assert exc_info.value.error == "HTTP 401: Unauthorized"
        await client.close()

    async def test_non_object_reply(self) -> None:
        transport = httpx.MockTransport(lambda r: httpx.Response(200, json=[1, 2]))
        client = NodeClient(_config(), transport=transport)
        await client.connect()
        with pytest.raises(NodeError) as exc_info:
            await client.get_block_count()
        assert exc_info.value.error == "malformed JSON-RPC reply"
        await client.close()

    async def test_http_error_without_error_object(self) -> None:
        transport = httpx.MockTransport(
            lambda r: httpx.Response(503, json={"result": None, "error": None, "id": 1})
        )
        client = NodeClient(_config(), transport=transport)
        await client.connect()
        with pytest.raises(NodeError) as exc_info:
            await client.get_best_block_hash()
        assert exc_info.value.error == "HTTP 503"
        await client.close()

    async def test_transport_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused")

        client = NodeClient(_config(), transport=httpx.MockTransport(handler))
        await client.connect()
        with pytest.raises(NodeError, match="getblockcount failed") as exc_info:
            await client.get_block_count()
        assert exc_info.value.error == "connection refused"
        await client.close()

    async def test_unexpected_result_shape(self, fake_node) -> None:
        fake_node.results["getaddressutxos"] = {"not": "a list"}
        client = NodeClient(_config(), transport=fake_node.transport())
        await client.connect()
        with pytest.raises(NodeError) as exc_info:
            await client.get_address_utxos(["1Addr"])
        assert exc_info.value.error == "expected a list result"
        await client.close()

    async def test_errors_are_counted(self, fake_node) -> None:
        fake_node.results["getblockcount"] = 10
        fake_node.errors["getdifficulty"] = "boom"
        metrics = ExplorerMetrics()
        client = NodeClient(_config(), transport=fake_node.transport(), metrics=metrics)
        await client.connect()
        await client.get_block_count()
        with pytest.raises(NodeError):
            await client.get_difficulty()
        await client.close()

        registry = metrics.registry
        assert (
            registry.get_sample_value(
                "addrindex_node_rpc_duration_seconds_count", {"method": "getblockcount"}
            )
            == 1.0
        )
        assert (
            registry.get_sample_value(
                "addrindex_node_rpc_errors_total", {"method": "getdifficulty"}
            )
            == 1.0
        )


class TestNodeClientMethods:
    @pytest.fixture
    async def client(self, fake_node):
        client = NodeClient(_config(), transport=fake_node.transport())
        await client.connect()
        yield client
        await client.close()

    async def test_address_utxos(self, client, fake_node) -> None:
        fake_node.results["getaddressutxos"] = [
            {
                "address": "1Addr",
                "txid": "aa" * 32,
                "outputIndex": 1,
                "script": "76a9",
                "satoshis": 1127408,
                "height": 500,
            }
        ]
        utxos = await client.get_address_utxos(["1Addr"])
        assert fake_node.calls == [("getaddressutxos", [{"addresses": ["1Addr"]}])]
        assert utxos[0].satoshis == 1127408
        assert utxos[0].output_index == 1

    async def test_address_mempool_empty(self, client, fake_node) -> None:
        fake_node.results["getaddressmempool"] = None
        assert await client.get_address_mempool(["1Addr"]) == []

    async def test_address_txids_range(self, client, fake_node) -> None:
        fake_node.results["getaddresstxids"] = ["t1", "t2"]
        assert await client.get_address_txids(["1Addr"], 373601, 800000) == ["t1", "t2"]
        assert fake_node.calls[0] == (
            "getaddresstxids",
            [{"addresses": ["1Addr"], "start": 373601, "end": 800000}],
        )

    async def test_address_balance(self, client, fake_node) -> None:
        fake_node.results["getaddressbalance"] = {"balance": 0, "received": 10000}
        balance = await client.get_address_balance(["1Addr"])
        assert (balance.balance, balance.received) == (0, 10000)

    async def test_address_deltas(self, client, fake_node) -> None:
        fake_node.results["getaddressdeltas"] = [
            {
                "address": "1Addr",
                "txid": "aa" * 32,
                "index": 1,
                "satoshis": -5000,
                "height": 400000,
                "blockindex": 7,
            },
            {"txid": "bb" * 32},
        ]

        deltas = await client.get_address_deltas(["1Addr"], 373601, 400000)

        assert fake_node.calls == [
            (
                "getaddressdeltas",
                [{"addresses": ["1Addr"], "start": 373601, "end": 400000}],
            )
        ]
        assert (deltas[0].satoshis, deltas[0].height, deltas[0].blockindex) == (-5000, 400000, 7)
        assert deltas[0].index == 1
        assert (deltas[1].address, deltas[1].index, deltas[1].satoshis) == ("", 0, 0)
        assert (deltas[1].height, deltas[1].blockindex) == (0, 0)

    async def test_address_deltas_empty(self, client, fake_node) -> None:
        fake_node.results["getaddressdeltas"] = None
        assert await client.get_address_deltas(["1Addr"], 0, 1) == []

    async def test_spent_info(self, client, fake_node) -> None:
        fake_node.results["getspentinfo"] = {"txid": "cc" * 32, "index": 2, "height": 400001}

        spent = await client.get_spent_info("aa" * 32, 0)

        assert fake_node.calls == [("getspentinfo", [{"txid": "aa" * 32, "index": 0}])]
        assert (spent.txid, spent.index, spent.height) == ("cc" * 32, 2, 400001)

    async def test_spent_info_defaults(self, client, fake_node) -> None:
        fake_node.results["getspentinfo"] = {}
        spent = await client.get_spent_info("aa" * 32, 0)
        assert (spent.txid, spent.index, spent.height) == ("", 0, 0)

    async def test_spent_info_unspent_output(self, client, fake_node) -> None:
        fake_node.errors["getspentinfo"] = "Unable to get spent info"
        with pytest.raises(NodeError) as exc_info:
            await client.get_spent_info("aa" * 32, 0)
        assert exc_info.value.message == "getspentinfo failed"
        assert exc_info.value.error == "Unable to get spent info"

    async def test_block_hashes(self, client, fake_node) -> None:
        fake_node.results["getblockhashes"] = ["h1", "h2"]
        assert await client.get_block_hashes(2000, 1000) == ["h1", "h2"]
        assert fake_node.calls[0] == ("getblockhashes", [2000, 1000])

    async def test_raw_transaction_is_verbose(self, client, fake_node) -> None:
        fake_node.results["getrawtransaction"] = {"txid": "t1", "hex": "00"}
        tx = await client.get_raw_transaction("t1")
        assert tx.hex == "00"
        assert fake_node.calls[0] == ("getrawtransaction", ["t1", 1])

    async def test_send_and_verify(self, client, fake_node) -> None:
        fake_node.results["sendrawtransaction"] = "t9"
        fake_node.results["verifymessage"] = True
        assert await client.send_raw_transaction("0100") == "t9"
        assert await client.verify_message("1Addr", "sig", "hello") is True
        assert fake_node.calls[1] == ("verifymessage", ["1Addr", "sig", "hello"])

    async def test_chain_state(self, client, fake_node) -> None:
        fake_node.results.update(
            {
                "getblockhash": "h100",
                "getdifficulty": 1.5,
                "getbestblockhash": "tip",
                "getblockchaininfo": {"blocks": 90, "headers": 100},
            }
        )
        assert await client.get_block_hash(100) == "h100"
        assert await client.get_difficulty() == 1.5
        assert await client.get_best_block_hash() == "tip"
        info = await client.get_blockchain_info()
        assert info.sync_percentage == 90
        assert info.synced is False
