"""Input normalization."""

from .config_resolver import DEFAULT_ENGINE_CONFIG, EngineConfig, resolve_engine_config
from .request import normalize_request

__all__ = ["DEFAULT_ENGINE_CONFIG", "EngineConfig", "normalize_request", "resolve_engine_config"]
