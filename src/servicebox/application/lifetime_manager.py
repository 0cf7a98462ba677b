import logging
import threading
from typing import Any, Dict, Optional, Tuple

from servicebox.domain import (
    DIException,
    ILifetimeManager,
    IServiceRegistry,
    Lifetime,
    Registration,
    ServiceCreationError,
    TypeIdentity,
)

logger = logging.getLogger(__name__)


class LifetimeManager(ILifetimeManager):
    """Manages instance lifetimes for singleton and transient services.

    Singletons are cached per type identity and belong to this manager, so two
    containers never share an instance. Creation of each singleton runs under
    its own reentrant lock: concurrent first resolutions invoke the creator
    exactly once, and a creator may resolve other singletons on the same thread.

    Each cached instance is stored with the registration that produced it, and
    a lookup only hits when that registration is the one being resolved. When
    a registry is given, an instance is cached only if its registration is
    still the registry's current entry, so a creation that finishes after its
    registration was replaced or cleared never leaks into the cache.

    Attributes:
        _registry: Optional registry consulted before caching.
        _singleton_cache: Cached ``(registration, instance)`` pairs.
        _creation_locks: One lock per singleton identity, kept for the manager's lifetime.
        _guard: Protects ``_creation_locks`` and ``_singleton_cache``.
    """

    def __init__(self, registry: Optional[IServiceRegistry] = None) -> None:
        """Initialize the lifetime manager with an empty cache.

        Args:
            registry: Registry whose current entries decide what may be cached.
        """
        self._registry = registry
        self._singleton_cache: Dict[TypeIdentity, Tuple[Registration, Any]] = {}
        self._creation_locks: Dict[TypeIdentity, "threading.RLock"] = {}
        self._guard = threading.Lock()

    def get_or_create(self, registration: Registration) -> Any:
        """Get existing instance or create new one based on lifetime.

        Args:
            registration: Registration carrying the creator and lifetime.

        Returns:
            Instance according to lifetime rules:
            - Singleton: Returns cached instance or creates and caches new one
            - Transient: Always creates new instance

        Raises:
            ServiceCreationError: If the creator raises a non-DI exception.

        Example:
            >>> registration = Registration(
            ...     identity=TypeIdentity.of(MyService),
            ...     service_type=MyService,
            ...     source=MyService,
            ...     creator=MyService,
            ...     lifetime=Lifetime.SINGLETON,
            ...     kind=CreationKind.TYPE,
            ... )
            >>> instance = manager.get_or_create(registration)
        """
        if registration.lifetime == Lifetime.SINGLETON:
            return self._get_or_create_singleton(registration)

        # Lifetime.TRANSIENT
        return self._create(registration)

    def _cached(self, registration: Registration) -> Tuple[bool, Any]:
        with self._guard:
            entry = self._singleton_cache.get(registration.identity)
        if entry is not None and entry[0] is registration:
            return True, entry[1]
        return False, None

    def _get_or_create_singleton(self, registration: Registration) -> Any:
        found, instance = self._cached(registration)
        if found:
            return instance

        identity = registration.identity
        with self._lock_for(identity):
            # Another thread may have finished creation while we waited
            found, instance = self._cached(registration)
            if found:
                return instance

            instance = self._create(registration)
            if not self._is_current(registration):
                logger.debug("Not caching singleton %s: registration was replaced", registration.describe())
                return instance

            with self._guard:
                self._singleton_cache[identity] = (registration, instance)
            logger.debug("Created singleton %s", registration.describe())
            return instance

    def _is_current(self, registration: Registration) -> bool:
        if self._registry is None:
            return True
        return self._registry.lookup(registration.identity) is registration

    def _lock_for(self, identity: TypeIdentity) -> "threading.RLock":
        with self._guard:
            lock = self._creation_locks.get(identity)
            if lock is None:
                lock = self._creation_locks[identity] = threading.RLock()
            return lock

    @staticmethod
    def _create(registration: Registration) -> Any:
        try:
            return registration.creator()
        except (DIException, RecursionError):
            raise
        except Exception as e:
            raise ServiceCreationError(registration.service_type, f"Failed to create instance: {e}") from e

    def is_cached(self, identity: TypeIdentity) -> bool:
        """Check whether a singleton has been created for an identity."""
        with self._guard:
            return identity in self._singleton_cache

    def evict(self, identity: TypeIdentity) -> None:
        """Drop the cached singleton for an identity.

        Waits for an in-flight creation of that identity to finish. The next
        resolution creates a fresh instance.
        """
        with self._lock_for(identity):
            with self._guard:
                self._singleton_cache.pop(identity, None)

    def clear_cache(self) -> None:
        """Clear all cached singletons.

        Creation locks are kept, so a creation still running keeps excluding
        other creators of the same identity.
        """
        with self._guard:
            self._singleton_cache.clear()
