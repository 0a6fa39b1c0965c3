"""Runtime configuration for research-friend.

Defaults live on frozen dataclasses; ``load_settings`` layers
``RESEARCH_FRIEND_*`` environment variables (and a ``.env`` file) on top.
"""

import dataclasses
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

MIB = 1024 * 1024

ENV_PREFIX = "RESEARCH_FRIEND_"
DEFAULT_STASH_DIRNAME = ".research-friend"


@dataclass(frozen=True)
class AskOptions:
    """Limits and behaviour for ask mode.

    ``chars_per_token`` is a fixed approximation (about 4 characters per
    token for English text), not a tokenizer-accurate count. Size checks and
    chunk boundaries are derived from it so they stay deterministic.
    """

    max_input_tokens: int = 150_000
    max_output_tokens: int = 4096
    timeout_ms: int = 300_000
    split_and_synthesize: bool = False
    hard_limit_chars: int = 20 * MIB
    headroom_tokens: int = 2000
    prompt_overhead_tokens: int = 2000
    chunk_overlap_chars: int = 500
    chars_per_token: int = 4

    def with_overrides(self, **overrides) -> "AskOptions":
        """Return a copy with the given fields replaced, skipping ``None`` values."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **changes) if changes else self


@dataclass(frozen=True)
class ClassificationOptions:
    """Sampling budget and model limits for topic classification."""

    max_chars: int = 50_000
    chunk_count: int = 5
    max_output_tokens: int = 512
    timeout_ms: int = 60_000


@dataclass(frozen=True)
class Settings:
    """Process-wide settings shared by the server and the CLI."""

    stash_root: Path = field(default_factory=lambda: Path.home() / DEFAULT_STASH_DIRNAME)
    ask: AskOptions = field(default_factory=AskOptions)
    classification: ClassificationOptions = field(default_factory=ClassificationOptions)
    cache_max_bytes: int = 25 * MIB
    ripgrep_path: str = "rg"


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(ENV_PREFIX + name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(env: Mapping[str, str], name: str, default: int, minimum: int = 1) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(minimum, value)


def _resolve_ripgrep(configured: Optional[str]) -> str:
    if configured:
        return configured
    return shutil.which("rg") or "rg"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from defaults and environment variables.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ`` after
            loading a ``.env`` file from the working directory.

    Returns:
        Fully populated Settings
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    defaults = AskOptions()
    ask = AskOptions(
        max_input_tokens=_env_int(environ, "ASK_MAX_INPUT_TOKENS", defaults.max_input_tokens),
        max_output_tokens=_env_int(environ, "ASK_MAX_OUTPUT_TOKENS", defaults.max_output_tokens),
        timeout_ms=_env_int(environ, "ASK_TIMEOUT_MS", defaults.timeout_ms),
        split_and_synthesize=_env_bool(
            environ, "ASK_SPLIT_AND_SYNTHESIZE", defaults.split_and_synthesize
        ),
    )

    classification_defaults = ClassificationOptions()
    classification = ClassificationOptions(
        max_chars=_env_int(
            environ, "CLASSIFY_MAX_CHARS", classification_defaults.max_chars, minimum=200
        ),
        # Out-of-range counts are clamped to 3..8 by the sampler itself
        chunk_count=_env_int(environ, "CLASSIFY_CHUNK_COUNT", classification_defaults.chunk_count),
    )

    home = environ.get(ENV_PREFIX + "HOME")
    stash_root = Path(home).expanduser() if home else Path.home() / DEFAULT_STASH_DIRNAME

    return Settings(
        stash_root=stash_root,
        ask=ask,
        classification=classification,
        cache_max_bytes=_env_int(environ, "CACHE_MAX_BYTES", 25 * MIB),
        ripgrep_path=_resolve_ripgrep(environ.get(ENV_PREFIX + "RG_PATH")),
    )
