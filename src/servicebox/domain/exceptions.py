from typing import Any, Optional


def _type_name(service_type: Any) -> str:
    return getattr(service_type, "__qualname__", None) or repr(service_type)


class DIException(Exception):
    """Base exception for DI-related errors."""


class RegistrationError(DIException):
    """Raised for invalid registration arguments.

    This occurs when:
    - More than one of implementation, instance, factory or builder is given.
    - The implementation is not a subclass of the service type.
    - A factory or builder is not callable.
    """


class DuplicateRegistrationError(RegistrationError):
    """Raised when a service type is registered twice under the reject policy.

    Attributes:
        service_type: The type that already has a registration.
    """

    def __init__(self, service_type: Any) -> None:
        self.service_type = service_type
        super().__init__(f"Service {_type_name(service_type)} is already registered")


class ServiceNotRegisteredError(DIException):
    """Raised when a required service has no registration.

    Attributes:
        service_type: The type that could not be found.
    """

    def __init__(self, service_type: Any) -> None:
        self.service_type = service_type
        super().__init__(f"No implementation registered for {_type_name(service_type)}")


class IdentityCollisionError(DIException):
    """Raised when two distinct types map to the same type identity.

    This is a configuration defect: resolving would silently return the wrong service.

    Attributes:
        identity: The shared identity.
        registered_type: The type stored with the registration.
        requested_type: The type that collided with it.
    """

    def __init__(self, identity: Any, registered_type: Any, requested_type: Any) -> None:
        self.identity = identity
        self.registered_type = registered_type
        self.requested_type = requested_type
        super().__init__(
            f"Type identity collision on '{identity.key}': registered type {registered_type!r} "
            f"is not requested type {requested_type!r}"
        )


class ServiceTypeMismatchError(DIException):
    """Raised when a creation strategy produces an instance of the wrong type.

    Attributes:
        service_type: The requested service type.
        instance: The offending instance.
    """

    def __init__(self, service_type: Any, instance: Any) -> None:
        self.service_type = service_type
        self.instance = instance
        super().__init__(
            f"Instance of {type(instance).__qualname__} produced for {_type_name(service_type)} "
            f"is not an instance of the service type"
        )


class ServiceCreationError(DIException):
    """Raised when a creation strategy fails.

    The original exception is kept as ``__cause__``.

    Attributes:
        service_type: The type whose creation failed.
        reason: Optional reason for the failure.
    """

    def __init__(self, service_type: Any, reason: Optional[str] = None) -> None:
        self.service_type = service_type
        self.reason = reason
        message = f"Cannot create service {_type_name(service_type)}"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)
