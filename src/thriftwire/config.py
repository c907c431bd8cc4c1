from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class TransportConfig(BaseModel):
    buffered: bool = True
    buffer_size: int = Field(4096, ge=0, description="Read and write buffer capacity in bytes")


class CodecConfig(BaseModel):
    name: str = "thriftwire"
    transport: TransportConfig = Field(default_factory=TransportConfig)
    protocol: Literal["simple-json"] = "simple-json"
    log_level: str = "WARNING"


__all__ = [
    "TransportConfig",
    "CodecConfig",
]
