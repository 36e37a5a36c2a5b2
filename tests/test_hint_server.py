"""Integration tests for the hint server and its remote oracle client.

The server runs in-process behind a FastAPI TestClient; RemoteOracle
talks to it through that client.
"""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from limbvm.bigint.arith import add_mod, div_mod, mul_mod, sub_mod
from limbvm.bigint.limbs import BigInt3, pack
from limbvm.config import SECP256K1_PRIME
from limbvm.hints.app import create_app
from limbvm.hints.audit import HintJournal
from limbvm.hints.client import RemoteOracle
from limbvm.hints.oracle import HonestOracle, Witness
from limbvm.vm.context import ExecutionContext
from limbvm.vm.errors import MalformedInput, OracleInconsistency, OracleUnavailable

PRIME = SECP256K1_PRIME
P = BigInt3.from_int(PRIME)


@pytest.fixture()
def server():
    """Fresh hint server with its own journal."""
    journal = HintJournal()
    client = TestClient(create_app(journal=journal))
    return client, journal


# ---------- HTTP surface ---------------------------------------------------


class TestEndpoints:
    def test_health(self, server):
        client, _ = server
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    def test_div_mod(self, server):
        client, _ = server
        resp = client.post("/div_mod", json={"x": "15", "y": "3", "p": str(PRIME)})
        assert resp.status_code == 200
        assert resp.json() == {"limbs": ["5", "0", "0"], "flag": 1}

    def test_quotient(self, server):
        client, _ = server
        resp = client.post(
            "/quotient",
            json={"res": str(PRIME - 2), "x": "-2", "y": "1", "p": str(PRIME)},
        )
        assert resp.status_code == 200
        assert resp.json() == {"limbs": ["1", "0", "0"], "flag": 1}

    def test_accepts_json_integers(self, server):
        client, _ = server
        resp = client.post("/div_mod", json={"x": 15, "y": 3, "p": PRIME})
        assert resp.json()["limbs"] == ["5", "0", "0"]

    def test_zero_divisor_refused(self, server):
        client, journal = server
        resp = client.post("/div_mod", json={"x": "1", "y": "0", "p": str(PRIME)})
        assert resp.status_code == 422
        assert "error" in journal.entries()[-1]["outcome"]

    def test_non_invertible_divisor_refused(self, server):
        client, journal = server
        resp = client.post("/div_mod", json={"x": "5", "y": "6", "p": "15"})
        assert resp.status_code == 422
        assert "not invertible" in journal.entries()[-1]["outcome"]["error"]

    def test_garbage_integer_refused(self, server):
        client, _ = server
        resp = client.post("/div_mod", json={"x": "fifteen", "y": "1", "p": str(PRIME)})
        assert resp.status_code == 422

    def test_journal(self, server):
        client, _ = server
        client.post("/div_mod", json={"x": "15", "y": "1", "p": str(PRIME)})
        client.post("/quotient", json={"res": "15", "x": "15", "y": "1", "p": str(PRIME)})
        body = client.get("/journal").json()
        assert body["chain_valid"] is True
        assert [e["request"] for e in body["entries"]] == ["div_mod", "quotient"]


# ---------- RemoteOracle through the server -----------------------------


class TestRemoteOracle:
    def test_matches_honest_oracle(self, server):
        client, _ = server
        remote = RemoteOracle(client=client)
        honest = HonestOracle()
        assert remote.div_mod(10, 4, PRIME) == honest.div_mod(10, 4, PRIME)
        assert remote.quotient(PRIME - 7, 7 * PRIME - 7, 1, PRIME) == honest.quotient(
            PRIME - 7, 7 * PRIME - 7, 1, PRIME
        )

    def test_verified_arithmetic(self, server):
        client, journal = server
        ctx = ExecutionContext(oracle=RemoteOracle(client=client))
        x, y = BigInt3.from_int(5), BigInt3.from_int(3)
        assert pack(mul_mod(ctx, x, y, P)) == 15
        assert pack(add_mod(ctx, x, y, P)) == 8
        assert pack(sub_mod(ctx, x, y, P)) == 2
        assert pack(sub_mod(ctx, y, x, P)) == PRIME - 2
        # Two witnesses per reduction
        assert len(journal) == 8
        assert journal.verify_chain()

    def test_refusal_fails_reduction(self, server):
        client, _ = server
        ctx = ExecutionContext(oracle=RemoteOracle(client=client))
        with pytest.raises(OracleInconsistency):
            div_mod(ctx, BigInt3.from_int(1), BigInt3.from_int(0), P)

    def test_non_invertible_divisor_fails_reduction(self):
        client = TestClient(create_app(), raise_server_exceptions=False)
        ctx = ExecutionContext(oracle=RemoteOracle(client=client))
        with pytest.raises(OracleInconsistency):
            div_mod(ctx, BigInt3.from_int(5), BigInt3.from_int(6), BigInt3.from_int(15))

    def test_lying_server_is_caught(self):
        class Liar(HonestOracle):
            def div_mod(self, x, y, p):
                return Witness.from_int(super().div_mod(x, y, p).value + 1)

            def quotient(self, res, x, y, p):
                return Witness(limbs=(0, 0, 0), flag=0)

        client = TestClient(create_app(oracle=Liar()))
        ctx = ExecutionContext(oracle=RemoteOracle(client=client))
        with pytest.raises(OracleInconsistency):
            mul_mod(ctx, BigInt3.from_int(5), BigInt3.from_int(3), P)


# ---------- transport failures --------------------------------------------


def _mock_oracle(handler) -> RemoteOracle:
    transport = httpx.MockTransport(handler)
    return RemoteOracle(client=httpx.Client(transport=transport, base_url="http://oracle"))


class TestTransportFailures:
    def test_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(OracleUnavailable, match="unreachable"):
            _mock_oracle(handler).div_mod(1, 1, PRIME)

    def test_server_error(self):
        oracle = _mock_oracle(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(OracleUnavailable):
            oracle.div_mod(1, 1, PRIME)

    def test_malformed_body(self):
        oracle = _mock_oracle(lambda request: httpx.Response(200, json={"limbs": "nope"}))
        with pytest.raises(OracleUnavailable, match="Malformed"):
            oracle.div_mod(1, 1, PRIME)

    def test_refusal_maps_to_malformed_input(self):
        oracle = _mock_oracle(lambda request: httpx.Response(422, json={"detail": "no"}))
        with pytest.raises(MalformedInput):
            oracle.div_mod(1, 0, PRIME)

    def test_unavailable_propagates_through_arithmetic(self):
        oracle = _mock_oracle(lambda request: httpx.Response(503))
        ctx = ExecutionContext(oracle=oracle)
        with pytest.raises(OracleUnavailable):
            mul_mod(ctx, BigInt3.from_int(5), BigInt3.from_int(3), P)

    def test_context_manager_closes_owned_client(self):
        with RemoteOracle(base_url="http://oracle.invalid") as oracle:
            assert oracle._owns_client
        assert oracle._client.is_closed
