"""
Payment domain models.

- Order: Storefront order whose payment status this app settles
- GatewayOrderLink: Every Razorpay order id issued for an Order
"""

from payments.models.gateway_link import GatewayOrderLink
from payments.models.order import Order

__all__ = ["GatewayOrderLink", "Order"]
