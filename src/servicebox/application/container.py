import inspect
import logging
from typing import Any, Callable, Dict, Iterable, Optional, Type, TypeVar

from servicebox.application.creation import (
    Creator,
    builder_strategy,
    factory_strategy,
    instance_strategy,
    type_strategy,
)
from servicebox.application.lifetime_manager import LifetimeManager
from servicebox.application.registry import ServiceRegistry
from servicebox.domain import (
    ContainerOptions,
    CreationKind,
    IContainer,
    IdentityCollisionError,
    IServiceProvider,
    Lifetime,
    Registration,
    RegistrationError,
    ServiceNotRegisteredError,
    ServiceTypeMismatchError,
    TypeIdentity,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_protocol(service_type: Any) -> bool:
    return bool(getattr(service_type, "_is_protocol", False))


def _supports_isinstance(service_type: Any) -> bool:
    if not inspect.isclass(service_type):
        return False
    if _is_protocol(service_type):
        return bool(getattr(service_type, "_is_runtime_protocol", False))
    return True


class DIContainer(IContainer):
    """Main dependency injection container.

    Services are registered against an abstract type with one of two
    lifetimes. Each registration takes one of four shapes:

    - a concrete type, built with its no-argument constructor or a hook
      registered with ``instance_creator``;
    - a pre-built instance;
    - a zero-argument ``factory``;
    - a ``builder`` that receives the container and may resolve its own
      dependencies from it.

    Nothing is created at registration time. Singletons are created on their
    first resolution and cached by this container only.

    Attributes:
        _options: Container configuration.
        _registry: Registrations keyed by type identity.
        _lifetime_manager: Component managing instance lifetimes.
    """

    def __init__(self, options: Optional[ContainerOptions] = None) -> None:
        """Initialize the DI container with an empty registry.

        Args:
            options: Container configuration. Defaults to ``ContainerOptions()``.
        """
        self._options = options or ContainerOptions()
        self._registry = ServiceRegistry()
        self._lifetime_manager = LifetimeManager(self._registry)

    @property
    def options(self) -> ContainerOptions:
        return self._options

    def __copy__(self) -> "DIContainer":
        raise TypeError(f"{type(self).__name__} cannot be copied; registrations are bound to their container")

    def __deepcopy__(self, memo: Dict[int, Any]) -> "DIContainer":
        raise TypeError(f"{type(self).__name__} cannot be copied; registrations are bound to their container")

    # Registration

    def add_transient(
        self,
        service_type: Type[T],
        implementation: Optional[type] = None,
        *,
        instance: Optional[T] = None,
        factory: Optional[Callable[[], T]] = None,
        builder: Optional[Callable[[IServiceProvider], T]] = None,
    ) -> "DIContainer":
        """Register a service with transient lifetime.

        Every resolution produces a new instance. A transient registered from a
        pre-built ``instance`` hands out a shallow copy of it each time.

        Args:
            service_type: The abstract type consumers ask for.
            implementation: Concrete subclass to construct. Defaults to ``service_type``.
            instance: Pre-built instance to copy on every resolution.
            factory: Zero-argument function producing an instance.
            builder: Function receiving the container and producing an instance.

        Returns:
            The container, for chaining.

        Raises:
            RegistrationError: If the arguments are invalid.
            DuplicateRegistrationError: If already registered and duplicates are rejected.

        Example:
            >>> container.add_transient(RequestHandler, builder=lambda c: RequestHandler(
            ...     c.get_required_service(Repository)
            ... ))
        """
        return self._register(service_type, Lifetime.TRANSIENT, implementation, instance, factory, builder)

    def add_singleton(
        self,
        service_type: Type[T],
        implementation: Optional[type] = None,
        *,
        instance: Optional[T] = None,
        factory: Optional[Callable[[], T]] = None,
        builder: Optional[Callable[[IServiceProvider], T]] = None,
    ) -> "DIContainer":
        """Register a service with singleton lifetime.

        The creator runs lazily on the first resolution; the result is shared by
        every later resolution from this container.

        Args:
            service_type: The abstract type consumers ask for.
            implementation: Concrete subclass to construct. Defaults to ``service_type``.
            instance: Pre-built instance returned on every resolution.
            factory: Zero-argument function producing the instance.
            builder: Function receiving the container and producing the instance.

        Returns:
            The container, for chaining.

        Raises:
            RegistrationError: If the arguments are invalid.
            DuplicateRegistrationError: If already registered and duplicates are rejected.

        Example:
            >>> container.add_singleton(Repository, SqlRepository)
            >>> container.add_singleton(Settings, instance=Settings(debug=True))
        """
        return self._register(service_type, Lifetime.SINGLETON, implementation, instance, factory, builder)

    def register_singletons(self, dependencies: Dict[Type, Callable[[IServiceProvider], Any]]) -> "DIContainer":
        """Register multiple singleton builders at once.

        Args:
            dependencies: Dictionary mapping service types to builder functions.
                         Each builder receives the container and returns an instance.

        Example:
            >>> container.register_singletons({
            ...     DatabaseConfig: lambda c: DatabaseConfig.from_env(),
            ...     DatabaseConnection: lambda c: DatabaseConnection(c.get_required_service(DatabaseConfig)),
            ... })
        """
        for service_type, builder in dependencies.items():
            self.add_singleton(service_type, builder=builder)
        return self

    def register_transients(self, dependencies: Dict[Type, Callable[[IServiceProvider], Any]]) -> "DIContainer":
        """Register multiple transient builders at once.

        Args:
            dependencies: Dictionary mapping service types to builder functions.
                         Each builder receives the container and returns an instance.
        """
        for service_type, builder in dependencies.items():
            self.add_transient(service_type, builder=builder)
        return self

    def _register(
        self,
        service_type: Any,
        lifetime: Lifetime,
        implementation: Optional[type],
        instance: Any,
        factory: Optional[Callable[[], Any]],
        builder: Optional[Callable[[IServiceProvider], Any]],
    ) -> "DIContainer":
        given = {
            "implementation": implementation,
            "instance": instance,
            "factory": factory,
            "builder": builder,
        }
        provided = [name for name, value in given.items() if value is not None]
        if len(provided) > 1:
            raise RegistrationError(f"Provide only one of {', '.join(provided)} when registering {service_type!r}")

        if builder is not None:
            kind, source = CreationKind.BUILDER, builder
        elif factory is not None:
            kind, source = CreationKind.FACTORY, factory
        elif instance is not None:
            kind, source = CreationKind.INSTANCE, instance
        else:
            kind, source = CreationKind.TYPE, implementation if implementation is not None else service_type

        self._validate_source(service_type, kind, source)

        registration = Registration(
            identity=TypeIdentity.of(service_type),
            service_type=service_type,
            source=source,
            creator=self._build_creator(kind, source, lifetime),
            lifetime=lifetime,
            kind=kind,
            implementation_name=self._implementation_name(kind, source),
        )
        self._add(registration)
        return self

    def _validate_source(self, service_type: Any, kind: CreationKind, source: Any) -> None:
        if kind in (CreationKind.FACTORY, CreationKind.BUILDER):
            if not callable(source):
                raise RegistrationError(f"The {kind.value} registered for {service_type!r} is not callable")
            return

        if kind == CreationKind.INSTANCE:
            if self._options.validate_instances and _supports_isinstance(service_type):
                if not isinstance(source, service_type):
                    raise RegistrationError(
                        f"Instance of {type(source).__qualname__} is not an instance of {service_type!r}"
                    )
            return

        # CreationKind.TYPE
        if not inspect.isclass(source):
            raise RegistrationError(f"Implementation {source!r} for {service_type!r} is not a class")
        if _is_protocol(source):
            raise RegistrationError(f"Implementation {source!r} is a protocol and cannot be constructed")
        if inspect.isclass(service_type) and not _is_protocol(service_type):
            if not issubclass(source, service_type):
                raise RegistrationError(f"{source.__qualname__} is not a subclass of {service_type.__qualname__}")

    def _build_creator(self, kind: CreationKind, source: Any, lifetime: Lifetime) -> Creator:
        if kind == CreationKind.BUILDER:
            return builder_strategy(source, self)
        if kind == CreationKind.FACTORY:
            return factory_strategy(source)
        if kind == CreationKind.INSTANCE:
            return instance_strategy(source, lifetime)
        return type_strategy(source, self)

    @staticmethod
    def _implementation_name(kind: CreationKind, source: Any) -> Optional[str]:
        if kind == CreationKind.TYPE:
            return source.__qualname__
        if kind == CreationKind.INSTANCE:
            return type(source).__qualname__
        return getattr(source, "__qualname__", None)

    def _add(self, registration: Registration) -> None:
        replaced = self._registry.register(registration, self._options.duplicate_policy)
        if replaced is not None:
            self._lifetime_manager.evict(registration.identity)

    def adopt_registrations(self, registrations: Iterable[Registration]) -> "DIContainer":
        """Copy registrations from another container, bound to this one.

        Creators are rebuilt so builders and hook-constructed types resolve
        their dependencies from this container. Cached singletons are not copied.

        Args:
            registrations: Registrations, usually from ``get_registry_copy()``.

        Returns:
            The container, for chaining.
        """
        for registration in registrations:
            rebound = registration.model_copy(
                update={"creator": self._build_creator(registration.kind, registration.source, registration.lifetime)}
            )
            self._add(rebound)
        return self

    def unregister(self, service_type: Any) -> bool:
        """Remove a registration and its cached singleton.

        Returns:
            True if a registration was removed.
        """
        identity = TypeIdentity.of(service_type)
        removed = self._registry.unregister(identity)
        self._lifetime_manager.evict(identity)
        if removed is not None:
            logger.debug("Unregistered %s", removed.describe())
        return removed is not None

    # Resolution

    def _lookup(self, service_type: Any) -> Optional[Registration]:
        identity = TypeIdentity.of(service_type)
        registration = self._registry.lookup(identity)
        if registration is None:
            return None
        if registration.service_type != service_type:
            raise IdentityCollisionError(identity, registration.service_type, service_type)
        return registration

    def _narrow(self, service_type: Any, instance: Any) -> Any:
        if self._options.validate_instances and _supports_isinstance(service_type):
            if not isinstance(instance, service_type):
                raise ServiceTypeMismatchError(service_type, instance)
        return instance

    def get_service(self, service_type: Type[T]) -> Optional[T]:
        """Resolve a service, or return None if it is not registered.

        Args:
            service_type: The abstract type to resolve.

        Returns:
            Instance according to the registered lifetime, or None.

        Raises:
            IdentityCollisionError: If a different type holds the same identity.
            ServiceTypeMismatchError: If the creator produced an instance of the wrong type.
            ServiceCreationError: If the creator raised.

        Example:
            >>> cache = container.get_service(Cache)
            >>> if cache is not None:
            ...     cache.warm_up()
        """
        registration = self._lookup(service_type)
        if registration is None:
            logger.debug("No registration for %s", TypeIdentity.of(service_type).name)
            return None

        instance = self._lifetime_manager.get_or_create(registration)
        return self._narrow(service_type, instance)

    def get_required_service(self, service_type: Type[T]) -> T:
        """Resolve a service that must be registered.

        Args:
            service_type: The abstract type to resolve.

        Returns:
            Instance according to the registered lifetime.

        Raises:
            ServiceNotRegisteredError: If the service type is not registered.
        """
        registration = self._lookup(service_type)
        if registration is None:
            raise ServiceNotRegisteredError(service_type)

        instance = self._lifetime_manager.get_or_create(registration)
        return self._narrow(service_type, instance)

    def is_registered(self, service_type: Any) -> bool:
        registration = self._registry.lookup(TypeIdentity.of(service_type))
        return registration is not None and registration.service_type == service_type

    def __contains__(self, service_type: object) -> bool:
        return self.is_registered(service_type)

    def __len__(self) -> int:
        return len(self._registry)

    def get_registry_copy(self) -> Dict[TypeIdentity, Registration]:
        """Get a copy of the current registrations.

        Returns:
            Copy of the registry, ordered by insertion.
        """
        return self._registry.snapshot()

    def clear(self) -> None:
        """Clear all registrations and cached instances.

        Useful for testing or resetting the container state.
        """
        self._registry.clear()
        self._lifetime_manager.clear_cache()
