"""
Infrastructure layer - External integrations.

This layer contains integrations with external frameworks and tools.
It depends on both Application and Domain layers.

Subpackages are imported explicitly; ``fastapi_integration`` needs the
``fastapi`` extra installed.
"""
