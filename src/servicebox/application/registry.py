"""Application layer - Service registry."""

import logging
import threading
from typing import Dict, Optional

from servicebox.domain import (
    DuplicatePolicy,
    DuplicateRegistrationError,
    IdentityCollisionError,
    IServiceRegistry,
    Registration,
    TypeIdentity,
)

logger = logging.getLogger(__name__)


class ServiceRegistry(IServiceRegistry):
    """Maps type identities to registrations.

    All access goes through a reentrant lock, so services can be registered
    while other threads resolve.

    Attributes:
        _registrations: Dictionary mapping identities to registrations.
        _lock: Guards ``_registrations``.
    """

    def __init__(self) -> None:
        self._registrations: Dict[TypeIdentity, Registration] = {}
        self._lock = threading.RLock()

    def register(
        self,
        registration: Registration,
        policy: DuplicatePolicy = DuplicatePolicy.REJECT,
    ) -> Optional[Registration]:
        """Store a registration according to the duplicate policy.

        Args:
            registration: The registration to store.
            policy: REJECT raises on duplicates, REPLACE overwrites.

        Returns:
            The registration that was replaced, or None.

        Raises:
            IdentityCollisionError: If the identity is held by a different type.
            DuplicateRegistrationError: If the identity is already registered under REJECT.
        """
        identity = registration.identity
        with self._lock:
            existing = self._registrations.get(identity)
            if existing is not None:
                if existing.service_type != registration.service_type:
                    raise IdentityCollisionError(identity, existing.service_type, registration.service_type)
                if policy == DuplicatePolicy.REJECT:
                    raise DuplicateRegistrationError(registration.service_type)
                logger.warning("Replacing registration %s with %s", existing.describe(), registration.describe())

            self._registrations[identity] = registration

        logger.debug("Registered %s", registration.describe())
        return existing

    def lookup(self, identity: TypeIdentity) -> Optional[Registration]:
        with self._lock:
            return self._registrations.get(identity)

    def unregister(self, identity: TypeIdentity) -> Optional[Registration]:
        with self._lock:
            return self._registrations.pop(identity, None)

    def snapshot(self) -> Dict[TypeIdentity, Registration]:
        with self._lock:
            return self._registrations.copy()

    def clear(self) -> None:
        with self._lock:
            self._registrations.clear()

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._registrations

    def __len__(self) -> int:
        with self._lock:
            return len(self._registrations)
