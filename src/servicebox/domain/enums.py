from enum import Enum


class Lifetime(str, Enum):
    """Defines the lifetime of a service instance.

    Attributes:
        TRANSIENT: New instance created on each resolution.
        SINGLETON: Single instance shared for the container's lifetime.
    """

    TRANSIENT = "transient"
    SINGLETON = "singleton"

    def __str__(self) -> str:
        return self.value


class DuplicatePolicy(str, Enum):
    """What the registry does when a type is registered twice.

    Attributes:
        REJECT: Raise DuplicateRegistrationError.
        REPLACE: Overwrite the previous registration and drop its cached singleton.
    """

    REJECT = "reject"
    REPLACE = "replace"

    def __str__(self) -> str:
        return self.value


class CreationKind(str, Enum):
    """How a registration produces its instances."""

    TYPE = "type"
    INSTANCE = "instance"
    FACTORY = "factory"
    BUILDER = "builder"

    def __str__(self) -> str:
        return self.value
