from typing import Any, Callable, Dict, Optional, Tuple, Type, TypeVar

from servicebox.application import DIContainer
from servicebox.domain import ContainerOptions, IServiceProvider, Lifetime

T = TypeVar("T")


class TestContainer(DIContainer):
    """DI container for testing with dependency override capabilities.

    Copies all registrations from a parent container, bound to itself, and
    allows selective replacement of services with test doubles. The parent is
    never modified and none of its cached singletons are shared.

    Produced instances are not checked against the service type, so plain
    ``Mock`` objects can stand in for real services.

    Attributes:
        _parent_container: The parent container to copy registrations from.
        _overrides: Service types replaced in this container.

    Example:
        >>> container = DIContainer()
        >>> container.add_singleton(EmailService, SmtpEmailService)
        >>> container.add_transient(UserService, builder=lambda c: UserService(
        ...     c.get_required_service(EmailService)
        ... ))
        >>>
        >>> def test_user_service():
        ...     test_container = TestContainer(container)
        ...     mock_email = Mock()
        ...     test_container.mock_singleton(EmailService, mock_email)
        ...
        ...     service = test_container.get_required_service(UserService)
        ...     assert service.email is mock_email
    """

    __test__ = False  # Tell pytest not to collect this class as a test

    def __init__(self, parent_container: Optional[DIContainer] = None) -> None:
        """Initialize the test container.

        Args:
            parent_container: Optional parent container to copy registrations from.
                            If None, creates an empty container.
        """
        base_options = parent_container.options if parent_container is not None else ContainerOptions()
        super().__init__(base_options.model_copy(update={"validate_instances": False}))
        self._parent_container = parent_container
        self._overrides: Dict[Type, Lifetime] = {}

        if parent_container is not None:
            self.adopt_registrations(parent_container.get_registry_copy().values())

    def mock_singleton(self, service_type: Type[T], mock_instance: Any) -> "TestContainer":
        """Replace a service with a mock instance shared by every resolution.

        Args:
            service_type: The type to mock.
            mock_instance: The mock instance to return.
        """
        self.unregister(service_type)
        self.add_singleton(service_type, factory=lambda: mock_instance)
        self._overrides[service_type] = Lifetime.SINGLETON
        return self

    def mock_transient(self, service_type: Type[T], factory: Callable[[], Any]) -> "TestContainer":
        """Replace a service with a mock factory called on each resolution.

        Args:
            service_type: The type to mock.
            factory: Factory function that returns a mock instance.

        Example:
            >>> test_container.mock_transient(RequestHandler, lambda: Mock())
            >>> handler1 = test_container.get_required_service(RequestHandler)
            >>> handler2 = test_container.get_required_service(RequestHandler)
            >>> assert handler1 is not handler2
        """
        self.unregister(service_type)
        self.add_transient(service_type, factory=factory)
        self._overrides[service_type] = Lifetime.TRANSIENT
        return self

    def override_registration(
        self,
        service_type: Type[T],
        builder: Callable[[IServiceProvider], Any],
        lifetime: Lifetime,
    ) -> "TestContainer":
        """Override a service registration with a custom builder and lifetime.

        Args:
            service_type: The type to override.
            builder: Function receiving the container and returning the instance.
            lifetime: Lifetime for the overridden service.

        Example:
            >>> test_container.override_registration(
            ...     CacheService,
            ...     lambda c: InMemoryCacheService(),
            ...     Lifetime.SINGLETON,
            ... )
        """
        if lifetime not in (Lifetime.SINGLETON, Lifetime.TRANSIENT):
            raise ValueError(f"Unsupported lifetime for override: {lifetime}")

        self.unregister(service_type)
        if lifetime == Lifetime.SINGLETON:
            self.add_singleton(service_type, builder=builder)
        else:
            self.add_transient(service_type, builder=builder)
        self._overrides[service_type] = lifetime
        return self

    @property
    def overrides(self) -> Dict[Type, Lifetime]:
        return dict(self._overrides)

    def reset_overrides(self) -> None:
        """Remove all overrides and restore the parent's registrations.

        Useful for cleaning up between test cases.
        """
        self._overrides.clear()
        self.clear()
        if self._parent_container is not None:
            self.adopt_registrations(self._parent_container.get_registry_copy().values())

    def __enter__(self) -> "TestContainer":
        """Context manager entry - returns self."""
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        """Context manager exit - drop overrides and every registration."""
        self._overrides.clear()
        self.clear()
        return False


def create_mock_container(*singletons: Tuple[Type, Any]) -> TestContainer:
    """Create a test container with pre-configured mock singletons.

    Args:
        *singletons: Tuples of (service_type, mock_instance).

    Returns:
        TestContainer with mocked services.

    Example:
        >>> test_container = create_mock_container(
        ...     (DatabaseConnection, mock_db),
        ...     (CacheService, mock_cache),
        ... )
    """
    container = TestContainer()

    for service_type, mock_instance in singletons:
        container.mock_singleton(service_type, mock_instance)

    return container
