from enum import Enum


class OrderStatus(Enum):
    PENDING = "pending"          # Created at checkout, awaiting payment confirmation
    CONFIRMED = "confirmed"      # Payment confirmed (owned by the payment subsystem)
    SHIPPED = "shipped"          # Handed to the carrier (owned by fulfillment)
    DELIVERED = "delivered"      # Received by the customer (owned by fulfillment)
    CANCELLED = "cancelled"      # Cancelled by the customer while still pending
