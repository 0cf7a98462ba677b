from typing import Any, Callable, Optional, Type, TypeVar

from fastapi import Depends

from servicebox.domain import IServiceProvider

T = TypeVar("T")


def create_fastapi_dependency(container: IServiceProvider, service_type: Type[T]) -> Callable[[], T]:
    """Create a FastAPI Depends() callable that resolves from the DI container.

    The resolved instance lifetime follows the registration in the container.
    An unregistered service raises ServiceNotRegisteredError when the endpoint
    is called.

    Args:
        container: The DI container to resolve services from.
        service_type: The type to resolve when the dependency is called.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> container = DIContainer()
        >>> container.add_singleton(UserRepository, builder=lambda c: UserRepository(
        ...     c.get_required_service(DatabaseConnection)
        ... ))
        >>>
        >>> get_user_repo = create_fastapi_dependency(container, UserRepository)
        >>>
        >>> @app.get("/users")
        >>> async def list_users(repo: UserRepository = Depends(get_user_repo)):
        ...     return await repo.get_all()
    """

    def dependency() -> T:
        """Resolve the service from the container."""
        return container.get_required_service(service_type)

    return dependency


def create_optional_dependency(container: IServiceProvider, service_type: Type[T]) -> Callable[[], Optional[T]]:
    """Create a FastAPI Depends() callable that yields None for unregistered services.

    Args:
        container: The DI container to resolve services from.
        service_type: The type to resolve when the dependency is called.

    Returns:
        A callable that FastAPI can use with Depends().
    """

    def dependency() -> Optional[T]:
        """Resolve the service from the container, or None."""
        return container.get_service(service_type)

    return dependency


def inject(container: IServiceProvider, service_type: Type[T], *, required: bool = True) -> Any:
    """Shorthand for ``Depends(create_fastapi_dependency(container, service_type))``.

    Args:
        container: The DI container to resolve services from.
        service_type: The type to resolve.
        required: Use ``get_required_service`` when True, ``get_service`` otherwise.

    Example:
        >>> @app.get("/health")
        >>> def health(clock: Clock = inject(container, Clock)):
        ...     return {"now": clock.now().isoformat()}
    """
    if required:
        return Depends(create_fastapi_dependency(container, service_type))
    return Depends(create_optional_dependency(container, service_type))
