"""Hint server FastAPI application.

Optional deployment of an oracle as a separate process.  It is not part
of the verified arithmetic: the verifier treats everything this server
says as untrusted, and ``RemoteOracle`` is just one way to inject an
oracle into an ``ExecutionContext``.

Endpoints:
- POST /div_mod   – res = x / y mod p, as three limbs
- POST /quotient  – k = (res*y - x) / p, as three limbs plus sign flag
- GET  /journal   – hash-chained record of every request served
- GET  /health

Integers travel as decimal strings.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Union

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from limbvm.hints.audit import HintJournal
from limbvm.hints.oracle import HonestOracle, Oracle, Witness
from limbvm.vm.errors import MalformedInput

# ------ request / response models ------


class DivModRequest(BaseModel):
    x: Union[str, int]
    y: Union[str, int]
    p: Union[str, int]


class QuotientRequest(BaseModel):
    res: Union[str, int]
    x: Union[str, int]
    y: Union[str, int]
    p: Union[str, int]


class WitnessResponse(BaseModel):
    limbs: List[str]
    flag: int = 1

    @classmethod
    def from_witness(cls, witness: Witness) -> "WitnessResponse":
        return cls(limbs=[str(v) for v in witness.limbs], flag=witness.flag)

    def to_witness(self) -> Witness:
        return Witness(limbs=tuple(int(v) for v in self.limbs), flag=self.flag)


class JournalResponse(BaseModel):
    entries: List[Dict[str, Any]]
    chain_valid: bool


def _parse(**values: Union[str, int]) -> Dict[str, int]:
    try:
        return {name: int(v) for name, v in values.items()}
    except ValueError as exc:
        raise HTTPException(422, f"Not an integer: {exc}") from exc


def create_app(
    oracle: Optional[Oracle] = None,
    journal: Optional[HintJournal] = None,
) -> FastAPI:
    """Factory that creates a hint server app.

    If *oracle* is not provided an ``HonestOracle`` answers requests.
    """
    if oracle is None:
        oracle = HonestOracle()
    if journal is None:
        journal = HintJournal()

    app = FastAPI(title="LimbVM Hint Server")

    def _serve(request: str, params: Dict[str, int], compute: Callable[[], Witness]) -> WitnessResponse:
        try:
            witness = compute()
        except MalformedInput as exc:
            journal.record(request, params, error=str(exc))
            raise HTTPException(422, str(exc)) from exc
        journal.record(request, params, limbs=list(witness.limbs), flag=witness.flag)
        return WitnessResponse.from_witness(witness)

    @app.post("/div_mod", response_model=WitnessResponse)
    async def div_mod(req: DivModRequest):
        args = _parse(x=req.x, y=req.y, p=req.p)
        return _serve(
            "div_mod", args,
            lambda: oracle.div_mod(args["x"], args["y"], args["p"]),
        )

    @app.post("/quotient", response_model=WitnessResponse)
    async def quotient(req: QuotientRequest):
        args = _parse(res=req.res, x=req.x, y=req.y, p=req.p)
        return _serve(
            "quotient", args,
            lambda: oracle.quotient(args["res"], args["x"], args["y"], args["p"]),
        )

    @app.get("/journal", response_model=JournalResponse)
    async def get_journal():
        return JournalResponse(entries=journal.entries(), chain_valid=journal.verify_chain())

    @app.get("/health")
    async def health():
        return {"status": "ok", "served": len(journal)}

    return app
