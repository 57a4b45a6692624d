"""Payment processors for charging the extension difference"""

import asyncio
import httpx

from driveflow.config import settings
from driveflow.domain.exceptions import PaymentFailedError
from driveflow.domain.models import PaymentMethod, PaymentResult
from driveflow.infrastructure.observability.metrics import payment_failure_counter


class SimulatedPaymentProcessor:
    """
    Stand-in for the M-Pesa STK push: waits, then always succeeds.

    Used until a gateway contract exists; tests pass delay_seconds=0.
    """

    def __init__(self, delay_seconds: float | None = None):
        self.delay_seconds = settings.simulated_payment_delay_seconds if delay_seconds is None else delay_seconds

    async def charge_difference(self, amount_cents: int, method: PaymentMethod, idempotency_key: str) -> PaymentResult:
        await asyncio.sleep(self.delay_seconds)
        return PaymentResult(
            success=True,
            amount_cents=amount_cents,
            method=method,
            reference=f"SIM{idempotency_key.replace('-', '')[:8].upper()}",
        )


class PaymentGatewayClient:
    """HTTP client for an external payment gateway"""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = base_url or settings.payment_api_base
        self.timeout = timeout or settings.http_timeout_seconds

    async def charge_difference(self, amount_cents: int, method: PaymentMethod, idempotency_key: str) -> PaymentResult:
        """
        Request a charge for the given amount.

        The caller owns the Idempotency-Key and sends the same one on every
        retry of one payment; the gateway replays the first outcome.

        Raises:
            PaymentFailedError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/payments/charge",
                    json={"amount_cents": amount_cents, "method": method.value},
                    headers={"Idempotency-Key": idempotency_key},
                )
                response.raise_for_status()
                data = response.json()

                result = PaymentResult(
                    success=bool(data["success"]),
                    amount_cents=amount_cents,
                    method=method,
                    reference=data.get("reference"),
                    message=data.get("message"),
                )

            except httpx.TimeoutException as e:
                payment_failure_counter.labels(method=method.value).inc()
                raise PaymentFailedError(f"Payment gateway timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                payment_failure_counter.labels(method=method.value).inc()
                raise PaymentFailedError(f"Payment gateway error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                payment_failure_counter.labels(method=method.value).inc()
                raise PaymentFailedError(f"Payment gateway unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                payment_failure_counter.labels(method=method.value).inc()
                raise PaymentFailedError(f"Invalid response from payment gateway: {e}") from e

        if not result.success:
            payment_failure_counter.labels(method=method.value).inc()
        return result
