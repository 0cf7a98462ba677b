"""
Domain layer - Core models, errors and interfaces.

This layer contains the fundamental rules and models for dependency injection.
It has no dependencies on other layers.
"""

from .enums import CreationKind, DuplicatePolicy, Lifetime
from .exceptions import (
    DIException,
    DuplicateRegistrationError,
    IdentityCollisionError,
    RegistrationError,
    ServiceCreationError,
    ServiceNotRegisteredError,
    ServiceTypeMismatchError,
)
from .interfaces import IContainer, ILifetimeManager, IServiceProvider, IServiceRegistry
from .models import ContainerOptions, Registration, TypeIdentity

__all__ = [
    # Enums
    "Lifetime",
    "DuplicatePolicy",
    "CreationKind",
    # Exceptions
    "DIException",
    "RegistrationError",
    "DuplicateRegistrationError",
    "ServiceNotRegisteredError",
    "IdentityCollisionError",
    "ServiceTypeMismatchError",
    "ServiceCreationError",
    # Interfaces
    "IServiceProvider",
    "IContainer",
    "IServiceRegistry",
    "ILifetimeManager",
    # Models
    "TypeIdentity",
    "Registration",
    "ContainerOptions",
]
