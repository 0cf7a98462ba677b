"""
Application layer - Registration, lifetimes and resolution.

This layer contains the use cases that orchestrate domain objects.
It depends only on the Domain layer.
"""

from .container import DIContainer
from .creation import create_instance, instance_creator, remove_instance_creator
from .lifetime_manager import LifetimeManager
from .registry import ServiceRegistry

__all__ = [
    "DIContainer",
    "ServiceRegistry",
    "LifetimeManager",
    "create_instance",
    "instance_creator",
    "remove_instance_creator",
]
