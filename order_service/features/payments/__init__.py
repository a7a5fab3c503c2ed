"""Payments feature package."""

from .decision import PaymentDecisionHandler
from .gateway import PaymentGateway, build_gateway
from .models import Payment
from .repository import PaymentRepository, get_payment_repository

__all__ = [
    "Payment",
    "PaymentDecisionHandler",
    "PaymentGateway",
    "PaymentRepository",
    "build_gateway",
    "get_payment_repository",
]
