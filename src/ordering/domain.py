"""Ordering bounded context: the Order Ledger and the checkout flow.

Turns a cart plus a single-use payment nonce into one successful charge at
the payment gateway and exactly one durable order keyed by the gateway's
transaction id.
"""

import structlog

logger = structlog.get_logger(__name__)
