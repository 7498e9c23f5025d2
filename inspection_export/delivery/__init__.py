"""Delivery adapters for finished downloads"""

from .adapter import (
    Delivery,
    DeliveryAdapter,
    DirectoryDeliveryAdapter,
    InMemoryDeliveryAdapter,
    media_type_for,
)

__all__ = [
    'Delivery',
    'DeliveryAdapter',
    'DirectoryDeliveryAdapter',
    'InMemoryDeliveryAdapter',
    'media_type_for',
]
