"""Braintree payment gateway adapter.

Talks to the Braintree GraphQL API over httpx. Every response is classified
into one of the three charge outcomes of the port:

- transport errors, timeouts, HTTP 401/403/5xx and GraphQL errors of a
  service class (``INTERNAL``, ``SERVICE_AVAILABILITY``...) are
  ``GatewayUnavailable``;
- GraphQL validation errors, other HTTP 4xx and transactions that come back
  in a failed status are ``GatewayRejected``, with the gateway's own message.
"""

from decimal import Decimal

import httpx

from payments.domain import logger
from payments.gateway.port import GatewayRejected, GatewayUnavailable, PaymentGateway, TransactionResult
from payments.gateway.settings import GatewaySettings

ENDPOINTS = {
    "sandbox": "https://payments.sandbox.braintree-api.com/graphql",
    "production": "https://payments.braintree-api.com/graphql",
}
API_VERSION = "2019-01-01"

UNAVAILABLE_ERROR_CLASSES = {
    "INTERNAL",
    "SERVICE_AVAILABILITY",
    "RESOURCE_LIMIT",
    "UNKNOWN",
    "AUTHENTICATION",
    "AUTHORIZATION",
    "UNSUPPORTED_CLIENT",
}
SUCCESS_STATUSES = {
    "AUTHORIZED",
    "SUBMITTED_FOR_SETTLEMENT",
    "SETTLING",
    "SETTLEMENT_PENDING",
    "SETTLED",
}

CLIENT_TOKEN_MUTATION = """
mutation CreateClientToken($input: CreateClientTokenInput) {
  createClientToken(input: $input) {
    clientToken
  }
}
"""

_TRANSACTION_FIELDS = """
    transaction {
      id
      legacyId
      status
      amount {
        value
        currencyCode
      }
      createdAt
    }
"""

CHARGE_MUTATION = (
    """
mutation ChargePaymentMethod($input: ChargePaymentMethodInput!) {
  chargePaymentMethod(input: $input) {"""
    + _TRANSACTION_FIELDS
    + """  }
}
"""
)

AUTHORIZE_MUTATION = (
    """
mutation AuthorizePaymentMethod($input: AuthorizePaymentMethodInput!) {
  authorizePaymentMethod(input: $input) {"""
    + _TRANSACTION_FIELDS
    + """  }
}
"""
)


class BraintreeGateway(PaymentGateway):
    """Braintree GraphQL client."""

    def __init__(self, settings: GatewaySettings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.url = ENDPOINTS[settings.environment]
        self.merchant_id = settings.merchant_id
        self.client = httpx.AsyncClient(
            auth=(settings.public_key, settings.private_key),
            timeout=settings.timeout,
            transport=transport,
            headers={
                "Braintree-Version": API_VERSION,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

    async def close(self) -> None:
        await self.client.aclose()

    async def issue_client_token(self) -> str:
        data = await self._execute(CLIENT_TOKEN_MUTATION, {})
        token = (data.get("createClientToken") or {}).get("clientToken")
        if not token:
            raise GatewayUnavailable("Braintree returned no client token")
        return token

    async def charge_total(self, amount: Decimal, nonce: str, settle_immediately: bool = True) -> TransactionResult:
        mutation, field = (
            (CHARGE_MUTATION, "chargePaymentMethod") if settle_immediately else (AUTHORIZE_MUTATION, "authorizePaymentMethod")
        )
        variables = {"input": {"paymentMethodId": nonce, "transaction": {"amount": f"{amount:.2f}"}}}

        data = await self._execute(mutation, variables)
        transaction = (data.get(field) or {}).get("transaction")
        if not transaction:
            raise GatewayRejected("Braintree returned no transaction", data)

        status = transaction.get("status", "")
        if status not in SUCCESS_STATUSES:
            raise GatewayRejected(f"Transaction {transaction.get('id')} ended in status {status}", transaction)

        logger.info("braintree.charge_succeeded", transaction_id=transaction["id"], status=status)
        return TransactionResult(
            transaction_id=transaction["id"],
            success=True,
            amount=(transaction.get("amount") or {}).get("value", f"{amount:.2f}"),
            status=status,
            raw_payload=transaction,
        )

    async def _execute(self, query: str, variables: dict) -> dict:
        """POST a GraphQL operation and return its ``data``, classifying every failure."""
        try:
            response = await self.client.post(self.url, json={"query": query, "variables": variables})
        except httpx.TimeoutException as exc:
            raise GatewayUnavailable("request to Braintree timed out") from exc
        except httpx.TransportError as exc:
            raise GatewayUnavailable(f"could not reach Braintree ({type(exc).__name__})") from exc

        if response.status_code in (401, 403) or response.status_code >= 500:
            logger.warning("braintree.http_error", status_code=response.status_code)
            raise GatewayUnavailable(f"Braintree responded with HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as exc:
            raise GatewayUnavailable("Braintree returned a malformed response") from exc
        if not isinstance(body, dict):
            raise GatewayUnavailable("Braintree returned a malformed response")

        if response.status_code >= 400:
            raise GatewayRejected(_first_message(body) or f"Braintree responded with HTTP {response.status_code}", body)

        errors = body.get("errors") or []
        if errors:
            error_classes = {(error.get("extensions") or {}).get("errorClass") for error in errors}
            message = _first_message(body)
            if error_classes & UNAVAILABLE_ERROR_CLASSES:
                logger.warning("braintree.service_error", error_classes=sorted(c for c in error_classes if c))
                raise GatewayUnavailable(message or "Braintree service error")
            raise GatewayRejected(message or "Braintree rejected the request", body)

        return body.get("data") or {}


def _first_message(body) -> str | None:
    if not isinstance(body, dict):
        return None
    for error in body.get("errors") or []:
        if error.get("message"):
            return error["message"]
    return None
