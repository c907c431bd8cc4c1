from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import ValidationError

from thriftwire.config import CodecConfig


def _apply_env_overrides(cfg: CodecConfig) -> CodecConfig:
    size = os.environ.get("THRIFTWIRE_BUFFER_SIZE")
    if size:
        try:
            cfg.transport.buffer_size = max(0, int(size))
        except ValueError as e:
            raise RuntimeError(f"THRIFTWIRE_BUFFER_SIZE is not an integer: {size!r}") from e
    buffered = os.environ.get("THRIFTWIRE_BUFFERED")
    if buffered:
        cfg.transport.buffered = buffered.strip().lower() not in {"0", "false", "no", "off"}
    level = os.environ.get("THRIFTWIRE_LOG_LEVEL")
    if level:
        cfg.log_level = level.upper()
    return cfg


def load_config(path: str | None = None) -> CodecConfig:
    """Load a config file (JSON, or YAML with PyYAML installed); no path means defaults."""
    if path is None:
        return _apply_env_overrides(CodecConfig())

    p = Path(path)
    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except ImportError as e:  # pragma: no cover
            raise RuntimeError(
                "PyYAML is required to load YAML configs. Install with `pip install thriftwire[yaml]`."
            ) from e
        data = yaml.safe_load(text)
    else:
        data = json.loads(text)

    # Accept a flat "buffer_size" shorthand next to the nested transport section
    if isinstance(data, dict) and "buffer_size" in data:
        data = dict(data)
        transport = dict(data.get("transport") or {})
        transport.setdefault("buffer_size", data.pop("buffer_size"))
        data["transport"] = transport

    try:
        cfg = CodecConfig.model_validate(data or {})
    except ValidationError as e:
        raise RuntimeError(f"Invalid configuration: {e}") from e
    return _apply_env_overrides(cfg)
