"""
FastAPI integration module.

Provides helpers for resolving servicebox services through FastAPI's Depends().
"""

from .integration import create_fastapi_dependency, create_optional_dependency, inject

__all__ = [
    "create_fastapi_dependency",
    "create_optional_dependency",
    "inject",
]
