from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from servicebox.domain.enums import DuplicatePolicy
from servicebox.domain.models import Registration, TypeIdentity

T = TypeVar("T")


class IServiceProvider(ABC):
    """Read-only view of a container, handed to registry-aware factories."""

    @abstractmethod
    def get_service(self, service_type: Type[T]) -> Optional[T]:
        """Return an instance of the requested service, or None if it is not registered.

        Args:
            service_type: The abstract type to resolve.
        """

    @abstractmethod
    def get_required_service(self, service_type: Type[T]) -> T:
        """Return an instance of the requested service.

        Args:
            service_type: The abstract type to resolve.

        Raises:
            ServiceNotRegisteredError: If the service type is not registered.
        """

    @abstractmethod
    def is_registered(self, service_type: Any) -> bool:
        """Check whether a service type has a registration."""


class IContainer(IServiceProvider):
    """Abstract interface for dependency injection container operations."""

    @abstractmethod
    def add_transient(
        self,
        service_type: Type[T],
        implementation: Optional[type] = None,
        *,
        instance: Optional[T] = None,
        factory: Optional[Callable[[], T]] = None,
        builder: Optional[Callable[[IServiceProvider], T]] = None,
    ) -> "IContainer":
        """Register a service with transient lifetime."""

    @abstractmethod
    def add_singleton(
        self,
        service_type: Type[T],
        implementation: Optional[type] = None,
        *,
        instance: Optional[T] = None,
        factory: Optional[Callable[[], T]] = None,
        builder: Optional[Callable[[IServiceProvider], T]] = None,
    ) -> "IContainer":
        """Register a service with singleton lifetime."""

    @abstractmethod
    def register_singletons(self, dependencies: Dict[Type, Callable[[IServiceProvider], Any]]) -> "IContainer":
        """Register multiple singleton services at once.

        Args:
            dependencies: A dictionary mapping types to their builder functions.
        """

    @abstractmethod
    def register_transients(self, dependencies: Dict[Type, Callable[[IServiceProvider], Any]]) -> "IContainer":
        """Register multiple transient services at once.

        Args:
            dependencies: A dictionary mapping types to their builder functions.
        """

    @abstractmethod
    def clear(self) -> None:
        """Clear all registrations and cached instances from the container."""

    @abstractmethod
    def get_registry_copy(self) -> Dict[TypeIdentity, Registration]:
        """Get a copy of the current registrations."""


class IServiceRegistry(ABC):
    """Abstract interface for the identity-to-registration mapping."""

    @abstractmethod
    def register(
        self,
        registration: Registration,
        policy: DuplicatePolicy = DuplicatePolicy.REJECT,
    ) -> Optional[Registration]:
        """Store a registration.

        Args:
            registration: The registration to store.
            policy: What to do if the identity is already registered.

        Returns:
            The replaced registration, if any.

        Raises:
            DuplicateRegistrationError: If the identity exists and policy is REJECT.
            IdentityCollisionError: If the identity exists for a different type.
        """

    @abstractmethod
    def lookup(self, identity: TypeIdentity) -> Optional[Registration]:
        """Return the registration for an identity, or None."""

    @abstractmethod
    def unregister(self, identity: TypeIdentity) -> Optional[Registration]:
        """Remove and return the registration for an identity, if present."""

    @abstractmethod
    def snapshot(self) -> Dict[TypeIdentity, Registration]:
        """Return a shallow copy of all registrations."""

    @abstractmethod
    def clear(self) -> None:
        """Remove all registrations."""


class ILifetimeManager(ABC):
    """Abstract interface for managing service lifetimes."""

    @abstractmethod
    def get_or_create(self, registration: Registration) -> Any:
        """Get existing instance or create a new one based on lifetime.

        Args:
            registration: The registration whose creator and lifetime apply.
        """

    @abstractmethod
    def evict(self, identity: TypeIdentity) -> None:
        """Drop the cached singleton for an identity, if any."""

    @abstractmethod
    def clear_cache(self) -> None:
        """Clear any cached instances managed by this lifetime manager."""
