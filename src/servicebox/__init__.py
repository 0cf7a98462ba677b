"""
servicebox: Minimal dependency injection registry with transient and singleton lifetimes.

Public API exports for the servicebox package.
"""

# Application exports
from servicebox.application.container import DIContainer
from servicebox.application.creation import instance_creator, remove_instance_creator

# Domain exports
from servicebox.domain.enums import CreationKind, DuplicatePolicy, Lifetime
from servicebox.domain.exceptions import (
    DIException,
    DuplicateRegistrationError,
    IdentityCollisionError,
    RegistrationError,
    ServiceCreationError,
    ServiceNotRegisteredError,
    ServiceTypeMismatchError,
)
from servicebox.domain.interfaces import IServiceProvider
from servicebox.domain.models import ContainerOptions, TypeIdentity

__version__ = "0.1.0"

__all__ = [
    # Container
    "DIContainer",
    "ContainerOptions",
    "IServiceProvider",
    "instance_creator",
    "remove_instance_creator",
    # Enums
    "Lifetime",
    "DuplicatePolicy",
    "CreationKind",
    # Models
    "TypeIdentity",
    # Exceptions
    "DIException",
    "RegistrationError",
    "DuplicateRegistrationError",
    "ServiceNotRegisteredError",
    "IdentityCollisionError",
    "ServiceTypeMismatchError",
    "ServiceCreationError",
]
