"""Payment gateway factory.

``build_gateway(settings)`` constructs the adapter named by the settings:
- FakeGateway for development and testing
- BraintreeGateway for sandbox and production

The application builds one gateway at startup and hands it to the routes
and the checkout coordinator; there is no module-level default instance.
"""

from payments.domain import logger
from payments.gateway.braintree_adapter import BraintreeGateway
from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import PaymentGateway
from payments.gateway.settings import GatewaySettings


def build_gateway(settings: GatewaySettings) -> PaymentGateway:
    """Return the gateway adapter configured by ``settings``."""
    settings.validate()
    if settings.gateway == "braintree":
        logger.info("gateway.configured", gateway="braintree", environment=settings.environment)
        return BraintreeGateway(settings)

    logger.info("gateway.configured", gateway="fake")
    return FakeGateway()
