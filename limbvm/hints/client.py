"""Oracle backed by a remote hint server.

``RemoteOracle`` satisfies the ``Oracle`` protocol by forwarding each
request to the hint server (see ``limbvm.hints.app``).  The answers get
exactly the same scrutiny as those of an in-process oracle.
"""

from __future__ import annotations

from typing import Dict, Optional

import httpx

from limbvm.config import ORACLE_TIMEOUT, ORACLE_URL
from limbvm.hints.app import WitnessResponse
from limbvm.hints.oracle import Witness
from limbvm.vm.errors import MalformedInput, OracleUnavailable


class RemoteOracle:
    """HTTP client for the hint server.

    Pass *client* to reuse an existing ``httpx.Client`` (for example a
    FastAPI ``TestClient``); otherwise one is created for *base_url*.
    """

    def __init__(
        self,
        base_url: str = ORACLE_URL,
        client: Optional[httpx.Client] = None,
        timeout: float = ORACLE_TIMEOUT,
    ) -> None:
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(base_url=base_url, timeout=timeout)

    def div_mod(self, x: int, y: int, p: int) -> Witness:
        return self._request("/div_mod", {"x": str(x), "y": str(y), "p": str(p)})

    def quotient(self, res: int, x: int, y: int, p: int) -> Witness:
        return self._request(
            "/quotient", {"res": str(res), "x": str(x), "y": str(y), "p": str(p)},
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "RemoteOracle":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, path: str, body: Dict[str, str]) -> Witness:
        try:
            resp = self._client.post(path, json=body)
        except httpx.HTTPError as exc:
            raise OracleUnavailable(f"Hint server unreachable: {exc}") from exc

        # 422 means the oracle itself could not produce a witness
        if resp.status_code == 422:
            raise MalformedInput(f"Hint server refused {path}: {resp.text}")
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise OracleUnavailable(f"Hint server error on {path}: {exc}") from exc

        try:
            return WitnessResponse.model_validate(resp.json()).to_witness()
        except ValueError as exc:
            raise OracleUnavailable(f"Malformed witness from {path}: {exc}") from exc
