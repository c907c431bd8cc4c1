"""Assemble transport and protocol factories from a ``CodecConfig``."""

from __future__ import annotations

import logging

from thriftwire.config import CodecConfig, TransportConfig
from thriftwire.protocol.base import Protocol, ProtocolFactory
from thriftwire.protocol.simple_json import SimpleJSONProtocolFactory
from thriftwire.transport.base import Transport, TransportFactory
from thriftwire.transport.buffered import BufferedTransportFactory

logger = logging.getLogger(__name__)

_PROTOCOLS: dict[str, type[ProtocolFactory]] = {
    "simple-json": SimpleJSONProtocolFactory,
}


def transport_factory(cfg: TransportConfig) -> TransportFactory:
    if cfg.buffered:
        return BufferedTransportFactory(cfg.buffer_size)
    return TransportFactory()


def protocol_factory(cfg: CodecConfig) -> ProtocolFactory:
    try:
        return _PROTOCOLS[cfg.protocol]()
    except KeyError as e:
        raise ValueError(f"Unknown protocol: {cfg.protocol}") from e


def build_protocol(trans: Transport, cfg: CodecConfig | None = None) -> Protocol:
    """Wrap ``trans`` per ``cfg`` and bind a protocol to the result."""
    cfg = cfg or CodecConfig()
    wrapped = transport_factory(cfg.transport).get_transport(trans)
    logger.debug(
        "Built %s over %s (buffer_size=%d)",
        cfg.protocol,
        type(wrapped).__name__,
        cfg.transport.buffer_size,
    )
    return protocol_factory(cfg).get_protocol(wrapped)
