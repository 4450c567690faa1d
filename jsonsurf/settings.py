from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

from .constants import CLOSER_POLICIES, CLOSER_POLICY_COMPAT


DEFAULT_CLOSER_POLICY = CLOSER_POLICY_COMPAT
DEFAULT_CHUNK_SIZE = 4096
DEFAULT_PREVIEW_CHARS = 120


def _safe_int(value: Any, default: int, minimum: int = 1) -> int:
    try:
        parsed = int(value)
        if parsed < minimum:
            return default
        return parsed
    except (TypeError, ValueError):
        return default


def _safe_policy(value: Any) -> str:
    policy = str(value or "").strip().lower()
    return policy if policy in CLOSER_POLICIES else DEFAULT_CLOSER_POLICY


@dataclass
class ExtractorSettings:
    closer_policy: str = DEFAULT_CLOSER_POLICY
    chunk_size: int = DEFAULT_CHUNK_SIZE
    preview_chars: int = DEFAULT_PREVIEW_CHARS

    def __post_init__(self):
        self.closer_policy = _safe_policy(self.closer_policy)
        self.chunk_size = _safe_int(self.chunk_size, DEFAULT_CHUNK_SIZE, minimum=1)
        self.preview_chars = _safe_int(self.preview_chars, DEFAULT_PREVIEW_CHARS, minimum=1)

    @classmethod
    def from_sources(
        cls,
        *,
        raw_extractor: Mapping[str, Any] | None = None,
        env: Mapping[str, str] | None = None,
        allow_env_override: bool = True,
    ) -> "ExtractorSettings":
        raw = dict(raw_extractor or {})
        env_map = env if env is not None else os.environ

        def pick(name: str, default: Any, env_key: str) -> Any:
            if allow_env_override:
                env_val = env_map.get(env_key)
                if env_val is not None and str(env_val).strip() != "":
                    return env_val
            return raw.get(name, default)

        return cls(
            closer_policy=_safe_policy(
                pick("closer_policy", DEFAULT_CLOSER_POLICY, env_key="JSONSURF_CLOSER_POLICY")
            ),
            chunk_size=_safe_int(
                pick("chunk_size", DEFAULT_CHUNK_SIZE, env_key="JSONSURF_CHUNK_SIZE"),
                DEFAULT_CHUNK_SIZE,
                minimum=1,
            ),
            preview_chars=_safe_int(
                pick("preview_chars", DEFAULT_PREVIEW_CHARS, env_key="JSONSURF_PREVIEW_CHARS"),
                DEFAULT_PREVIEW_CHARS,
                minimum=1,
            ),
        )


_extractor_settings: ExtractorSettings | None = None


def get_extractor_settings() -> ExtractorSettings:
    global _extractor_settings
    if _extractor_settings is None:
        _extractor_settings = ExtractorSettings.from_sources()
    return _extractor_settings


def set_extractor_settings(settings: ExtractorSettings | None) -> ExtractorSettings | None:
    global _extractor_settings
    _extractor_settings = settings
    return _extractor_settings


def configure_extractor_settings(
    *,
    raw_extractor: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
    allow_env_override: bool = True,
) -> ExtractorSettings:
    settings = ExtractorSettings.from_sources(
        raw_extractor=raw_extractor,
        env=env,
        allow_env_override=allow_env_override,
    )
    return set_extractor_settings(settings)
