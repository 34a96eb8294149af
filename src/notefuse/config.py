"""Search configuration loader.

Priority (high → low):
  1. Explicit keyword arguments at the call site (not handled here)
  2. Environment variables  (NOTEFUSE_CHUNK_SIZE, NOTEFUSE_EMBEDDING_MODEL, ...)
  3. Override mapping passed to load_config()
  4. Hardcoded defaults

There is no configuration file. API keys are never part of the config; LiteLLM
reads them from the provider's own environment variables.
"""

from __future__ import annotations

import dataclasses
import os
import warnings
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from notefuse.errors import InvalidConfiguration

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_ENV_PREFIX = "NOTEFUSE_"

DEFAULT_RESOURCE_TYPE = "meeting_note"


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class SearchConfig:
    """All tunable knobs of the indexing and retrieval pipeline.

    Attributes:
        chunk_size: Characters per chunk window.
        overlap: Characters shared by consecutive windows (must be < chunk_size).
        vector_weight: Multiplier on the vector channel's fusion score.
        lexical_weight: Multiplier on the lexical channel's position score.
        candidate_cap: Maximum records scanned by the brute-force vector index.
        default_limit: Result count used when the caller passes no limit.
        channel_multiplier: Each channel fetches ``limit * channel_multiplier``
            candidates before fusion.
        case_sensitive: Whether lexical substring matching respects case.
        embedding_model: LiteLLM embedding model string (provider/model format).
        dimensions: Vector length of the embedding client and of every stored
            record; the retriever rejects a client or repository that differs.
        embed_timeout: Seconds before an embedding call fails with Timeout
            (see LiteLLMEmbeddingClient.from_config).
        fetch_timeout: Seconds before a document fetch fails with Timeout.
        enrich_workers: Thread pool size for parallel document enrichment.
    """

    chunk_size: int = 500
    overlap: int = 50
    vector_weight: float = 1.0
    lexical_weight: float = 0.5
    candidate_cap: int = 1000
    default_limit: int = 10
    channel_multiplier: int = 2
    case_sensitive: bool = False
    embedding_model: str = "openai/text-embedding-3-small"
    dimensions: int = 1536
    embed_timeout: float = 30.0
    fetch_timeout: float = 10.0
    enrich_workers: int = 8

    def validate(self) -> SearchConfig:
        """Raise InvalidConfiguration if any value is out of range; return self."""
        if self.chunk_size < 1:
            raise InvalidConfiguration(f"chunk_size must be >= 1, got {self.chunk_size}")
        if self.overlap < 0:
            raise InvalidConfiguration(f"overlap must be >= 0, got {self.overlap}")
        if self.overlap >= self.chunk_size:
            raise InvalidConfiguration(
                f"overlap ({self.overlap}) must be smaller than chunk_size ({self.chunk_size})"
            )
        if self.vector_weight < 0 or self.lexical_weight < 0:
            raise InvalidConfiguration("fusion weights must be >= 0")
        for name in ("candidate_cap", "default_limit", "channel_multiplier", "dimensions", "enrich_workers"):
            if getattr(self, name) < 1:
                raise InvalidConfiguration(f"{name} must be >= 1, got {getattr(self, name)}")
        if self.embed_timeout <= 0 or self.fetch_timeout <= 0:
            raise InvalidConfiguration("timeouts must be > 0 seconds")
        if not self.embedding_model:
            raise InvalidConfiguration("embedding_model must not be empty")
        return self


_FIELDS: dict[str, dataclasses.Field] = {f.name: f for f in dataclasses.fields(SearchConfig)}


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def _coerce(name: str, value: Any) -> Any:
    """Convert *value* to the declared type of field *name*."""
    kind = _FIELDS[name].type
    try:
        if kind in ("bool", bool):
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in ("1", "true", "yes", "on"):
                    return True
                if lowered in ("0", "false", "no", "off"):
                    return False
                raise ValueError(value)
            return bool(value)
        if kind in ("int", int):
            return int(value)
        if kind in ("float", float):
            return float(value)
        return str(value)
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(f"Invalid value for '{name}': {value!r}") from exc


def _warn_unknown_keys(data: Mapping[str, Any]) -> None:
    """Emit a UserWarning for unrecognised override keys."""
    for key in data:
        if key not in _FIELDS:
            warnings.warn(
                f"Unknown config key '{key}', ignored.",
                UserWarning,
                stacklevel=3,
            )


def _env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect NOTEFUSE_* variables that name a known field."""
    found: dict[str, Any] = {}
    for name in _FIELDS:
        raw = env.get(_ENV_PREFIX + name.upper())
        if raw is not None and raw != "":
            found[name] = raw
    return found


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    overrides: Mapping[str, Any] | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> SearchConfig:
    """Build and validate a *SearchConfig*.

    Args:
        overrides: Plain mapping of field name → value, applied over defaults.
        env: Environment to read NOTEFUSE_* variables from. Defaults to os.environ.

    Returns:
        Validated *SearchConfig*.

    Raises:
        InvalidConfiguration: If a value cannot be coerced or is out of range.
    """
    values: dict[str, Any] = {}

    if overrides:
        _warn_unknown_keys(overrides)
        values.update({k: v for k, v in overrides.items() if k in _FIELDS})

    values.update(_env_overrides(os.environ if env is None else env))

    cfg = SearchConfig(**{k: _coerce(k, v) for k, v in values.items()})
    return cfg.validate()
