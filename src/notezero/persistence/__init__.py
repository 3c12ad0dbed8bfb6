"""Persistence: backend gateways, row mapping and the ordered write pipeline."""

from notezero.persistence.client import close_client, get_http_client, reset_client
from notezero.persistence.gateway import GatewayError, PersistenceGateway
from notezero.persistence.memory import InMemoryGateway
from notezero.persistence.pipeline import PersistencePipeline, is_transient
from notezero.persistence.records import BlockRecord, PageFilter, PageRecord
from notezero.persistence.rest import RestGateway

__all__ = [
    "BlockRecord",
    "close_client",
    "GatewayError",
    "get_http_client",
    "InMemoryGateway",
    "is_transient",
    "PageFilter",
    "PageRecord",
    "PersistenceGateway",
    "PersistencePipeline",
    "reset_client",
    "RestGateway",
]
