from functools import total_ordering
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from servicebox.domain.enums import CreationKind, DuplicatePolicy, Lifetime


@total_ordering
class TypeIdentity(BaseModel):
    """Stable, hashable key identifying an abstract service type.

    Built from the type's module and qualified name, so the same type always
    yields the same identity. Distinct types that share a qualified name (two
    local classes called ``Service`` in one function, for example) collide;
    registrations keep the originating type so that case is detected.

    Attributes:
        key: ``"<module>.<qualname>"`` of the service type.
        name: Human-readable name used in diagnostics.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Deterministic lookup key derived from the service type.")
    name: str = Field(..., description="Diagnostic name of the service type.")

    @classmethod
    def of(cls, service_type: Any) -> "TypeIdentity":
        """Build the identity of a service type.

        Args:
            service_type: A class, protocol or any other object used as a service key.

        Returns:
            The identity for ``service_type``.

        Example:
            >>> TypeIdentity.of(int)
            TypeIdentity(key='builtins.int', name='int')
        """
        qualname = getattr(service_type, "__qualname__", None)
        if qualname is None:
            text = repr(service_type)
            return cls(key=text, name=text)
        module = getattr(service_type, "__module__", None) or "<unknown>"
        return cls(key=f"{module}.{qualname}", name=qualname)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, TypeIdentity):
            return NotImplemented
        return self.key < other.key

    def __str__(self) -> str:
        return self.name


class Registration(BaseModel):
    """Value object pairing a type identity with its creation strategy.

    Attributes:
        identity: Identity of the service type.
        service_type: The originating service type, kept for collision checks.
        source: What the creator was built from: the implementation type, the
            instance, the factory or the builder.
        creator: Zero-argument creation strategy.
        lifetime: How long produced instances live.
        kind: Which registration shape produced the creator.
        implementation_name: Name of the concrete type, when known.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    identity: TypeIdentity = Field(..., description="Identity of the registered service type.")
    service_type: Any = Field(..., description="The service type being registered.")
    source: Any = Field(..., description="Implementation, instance, factory or builder behind the creator.")
    creator: Callable[[], Any] = Field(..., description="Zero-argument function producing an instance.")
    lifetime: Lifetime = Field(..., description="The lifetime of the registered service.")
    kind: CreationKind = Field(..., description="The registration shape that built the creator.")
    implementation_name: Optional[str] = Field(
        default=None,
        description="Name of the concrete implementation, when known.",
    )

    def describe(self) -> str:
        """Short description used in log records."""
        target = self.implementation_name or self.kind.value
        return f"{self.identity.name} -> {target} ({self.lifetime.value})"


class ContainerOptions(BaseModel):
    """Container configuration.

    Attributes:
        duplicate_policy: What to do when a service type is registered twice.
        validate_instances: Check produced instances against the requested type.
    """

    model_config = ConfigDict(frozen=True)

    duplicate_policy: DuplicatePolicy = Field(
        default=DuplicatePolicy.REJECT,
        description="Policy applied when a service type is registered twice.",
    )
    validate_instances: bool = Field(
        default=True,
        description="Whether resolved instances are checked with isinstance against the service type.",
    )
