"""Payments bounded context: the payment gateway client.

Owns the gateway port, its adapters (fake and Braintree) and the client-token
endpoint the storefront uses to render the gateway's payment form.
"""

import structlog

logger = structlog.get_logger(__name__)
