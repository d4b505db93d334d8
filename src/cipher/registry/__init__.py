"""Handler capability registry."""

from cipher.registry.models import HandlerCapability, HandlerCategory, HandlerSeed
from cipher.registry.registry import CapabilityRegistry, create_default_registry

__all__ = [
    "CapabilityRegistry",
    "HandlerCapability",
    "HandlerCategory",
    "HandlerSeed",
    "create_default_registry",
]
