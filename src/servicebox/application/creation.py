"""Application layer - Creation strategies.

Every registration shape compiles down to a zero-argument callable that
produces one instance when invoked.
"""

import copy
import threading
from typing import Any, Callable, Dict, Optional, TypeVar

from servicebox.domain import IServiceProvider, Lifetime

T = TypeVar("T")
Creator = Callable[[], Any]
InstanceCreatorHook = Callable[[IServiceProvider], Any]

_instance_creators: Dict[type, InstanceCreatorHook] = {}
_instance_creators_lock = threading.Lock()


def instance_creator(implementation: type) -> Callable[[InstanceCreatorHook], InstanceCreatorHook]:
    """Register custom construction logic for a concrete type.

    Types registered with ``add_transient(Base, Derived)`` or
    ``add_singleton(Base, Derived)`` are built by calling ``Derived()``. When
    ``Derived`` needs constructor arguments, decorate a function that receives
    the container and builds it.

    Args:
        implementation: The concrete type the hook builds.

    Returns:
        A decorator that registers the hook and returns it unchanged.

    Example:
        >>> @instance_creator(SmtpMailer)
        ... def create_mailer(provider):
        ...     return SmtpMailer(provider.get_required_service(Settings).smtp_host)
    """

    def decorator(hook: InstanceCreatorHook) -> InstanceCreatorHook:
        with _instance_creators_lock:
            _instance_creators[implementation] = hook
        return hook

    return decorator


def remove_instance_creator(implementation: type) -> Optional[InstanceCreatorHook]:
    """Unregister the custom construction hook for a concrete type, if any."""
    with _instance_creators_lock:
        return _instance_creators.pop(implementation, None)


def create_instance(implementation: type, provider: IServiceProvider) -> Any:
    """Build an instance of a concrete type.

    Uses the hook registered with :func:`instance_creator` when there is one,
    otherwise calls the type without arguments.
    """
    with _instance_creators_lock:
        hook = _instance_creators.get(implementation)
    if hook is not None:
        return hook(provider)
    return implementation()


def type_strategy(implementation: type, provider: IServiceProvider) -> Creator:
    """Strategy building a new instance of a concrete type per call."""

    def create() -> Any:
        return create_instance(implementation, provider)

    return create


def instance_strategy(instance: Any, lifetime: Lifetime) -> Creator:
    """Strategy returning a pre-built instance.

    Singletons hand out the instance itself. Transients hand out a shallow copy
    of it on every call, not a freshly constructed object.
    """
    if lifetime == Lifetime.SINGLETON:
        return lambda: instance
    return lambda: copy.copy(instance)


def factory_strategy(factory: Callable[[], T]) -> Creator:
    """Strategy calling a zero-argument factory per call."""

    def create() -> T:
        return factory()

    return create


def builder_strategy(builder: Callable[[IServiceProvider], T], provider: IServiceProvider) -> Creator:
    """Strategy calling a builder with the owning container per call."""

    def create() -> T:
        return builder(provider)

    return create
