from __future__ import annotations

import json
import logging
from pathlib import Path

import typer

from thriftwire.config import CodecConfig
from thriftwire.config_loader import load_config
from thriftwire.factory import build_protocol
from thriftwire.protocol.base import ProtocolError
from thriftwire.protocol.ttype import TType
from thriftwire.transport.base import TransportError
from thriftwire.transport.memory import MemoryTransport
from thriftwire.utils.stdout_guard import StdoutGuard

app = typer.Typer(add_completion=False, help="Inspect and produce Simple JSON wire data.")
logger = logging.getLogger(__name__)

ConfigOption = typer.Option(None, "--config", "-c", help="Path to YAML/JSON config")
BufferSizeOption = typer.Option(None, "--buffer-size", min=0, help="Override buffer capacity")


def _load(config: str | None, buffer_size: int | None) -> CodecConfig:
    cfg = load_config(config)
    if buffer_size is not None:
        cfg.transport.buffer_size = buffer_size
    return cfg


@app.command("encode-doubles")
def encode_doubles(
    values: list[float] = typer.Argument(..., help="Doubles to encode; inf, -inf and nan allowed"),
    config: str | None = ConfigOption,
    buffer_size: int | None = BufferSizeOption,
) -> None:
    """Write VALUES as a list of doubles and print the wire text."""
    cfg = _load(config, buffer_size)
    with StdoutGuard(cfg.log_level) as guard:
        sink = MemoryTransport()
        prot = build_protocol(sink, cfg)
        prot.write_list_begin(TType.DOUBLE, len(values))
        for value in values:
            prot.write_double(value)
        prot.write_list_end()
        prot.flush()
        guard.write(sink.getvalue() + b"\n")


@app.command("encode-binary")
def encode_binary(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="File to encode"),
    config: str | None = ConfigOption,
    buffer_size: int | None = BufferSizeOption,
) -> None:
    """Print the quoted base64 wire form of a file's bytes."""
    cfg = _load(config, buffer_size)
    with StdoutGuard(cfg.log_level) as guard:
        sink = MemoryTransport()
        prot = build_protocol(sink, cfg)
        prot.write_binary(path.read_bytes())
        prot.flush()
        guard.write(sink.getvalue() + b"\n")


@app.command("dump")
def dump(
    config: str | None = ConfigOption,
    buffer_size: int | None = BufferSizeOption,
) -> None:
    """Decode Simple JSON values from stdin and print each as indented JSON."""
    cfg = _load(config, buffer_size)
    data = typer.get_binary_stream("stdin").read()
    with StdoutGuard(cfg.log_level) as guard:
        prot = build_protocol(MemoryTransport(data), cfg)
        count = 0
        try:
            while prot.has_next():  # type: ignore[attr-defined]
                value = prot.read_value()  # type: ignore[attr-defined]
                guard.write(json.dumps(value, indent=2, ensure_ascii=False).encode("utf-8") + b"\n")
                count += 1
        except (ProtocolError, TransportError) as e:
            logger.error("Failed to decode value %d: %s", count + 1, e)
            raise typer.Exit(code=1) from e
        logger.info("Decoded %d value(s)", count)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
