from fastapi import FastAPI, Header
from pydantic import BaseModel
import os
import uuid

app = FastAPI(title="Mock Payment Gateway", version="1.0.0")
# Charges above this amount are declined, to exercise the failure path
DECLINE_ABOVE_CENTS = int(os.getenv("MOCK_DECLINE_ABOVE_CENTS", "100000000"))

_charges: dict[str, dict] = {}


class ChargeRequest(BaseModel):
    amount_cents: int
    method: str


@app.get("/health")
def health(): return {"status": "ok"}

@app.post("/payments/charge")
def charge(body: ChargeRequest, idempotency_key: str | None = Header(default=None)):
    if idempotency_key and idempotency_key in _charges:
        return _charges[idempotency_key]
    if body.amount_cents > DECLINE_ABOVE_CENTS:
        result = {"success": False, "reference": None, "message": "Insufficient funds"}
    else:
        prefix = "Q" if body.method == "mpesa" else "CH"
        result = {"success": True, "reference": f"{prefix}{uuid.uuid4().hex[:9].upper()}", "message": None}
    if idempotency_key:
        _charges[idempotency_key] = result
    return result
