"""Persistence layer: gateway interface, in-memory store and PostgreSQL backend."""

from .gateway import TABLES, Gateway, GatewayError, MemoryGateway, RecordNotFoundError

__all__ = [
    "TABLES",
    "Gateway",
    "GatewayError",
    "MemoryGateway",
    "RecordNotFoundError",
]
