from __future__ import annotations
from typing import Optional, Dict, Any, Union
from pathlib import Path
from dataclasses import dataclass, field
from enum import Enum
import yaml
import logging

from .providers.openrouter import OpenRouterTransport, OPENROUTER_CHAT_URL
from .secrets import CredentialStore
from ..pipeline.capture.orchestrator import CapturePipeline, DEFAULT_MODEL
from ..pipeline.capture.sources import ImageSource, ScreenImageSource, StaticImageSource
from ..pipeline.capture.types import DEFAULT_PROMPT

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parents[1] / "config" / "config.yaml"


class SourceKind(Enum):
    SCREEN = "screen"
    FILE = "file"
    NONE = "none"

@dataclass(frozen=True)
class EndpointConfig:
    url: str = OPENROUTER_CHAT_URL
    model: str = DEFAULT_MODEL
    referer: str = ""
    title: str = "passthrough-vlm"
    timeout: float = 60.0

@dataclass(frozen=True)
class CaptureConfig:
    width: int = 1280
    height: int = 960
    source: SourceKind = SourceKind.SCREEN
    path: Optional[str] = None
    default_prompt: str = DEFAULT_PROMPT

@dataclass(frozen=True)
class SecretsConfig:
    path: Optional[str] = None
    env_var: str = "OPENROUTER_API_KEY"

@dataclass(frozen=True)
class AppConfig:
    endpoint: EndpointConfig = field(default_factory=EndpointConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    secrets: SecretsConfig = field(default_factory=SecretsConfig)
    debug: bool = False


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    return section


def parse_config(config: Dict[str, Any]) -> AppConfig:
    if not isinstance(config, dict):
        raise ValueError("Config must be a mapping")
    if 'endpoint' not in config:
        raise ValueError("Config missing 'endpoint'")

    endpoint = _section(config, 'endpoint')
    for key in ('url', 'model'):
        if not endpoint.get(key):
            raise ValueError(f"Endpoint missing '{key}'")

    capture = dict(_section(config, 'capture'))
    if 'source' in capture:
        try:
            capture['source'] = SourceKind(capture['source'])
        except ValueError:
            raise ValueError(f"Unknown capture source '{capture['source']}'") from None
    if capture.get('source') is SourceKind.FILE and not capture.get('path'):
        raise ValueError("Capture source 'file' requires a 'path'")
    for key in ('width', 'height'):
        if key in capture and (not isinstance(capture[key], int) or capture[key] <= 0):
            raise ValueError(f"Capture {key} must be a positive integer")

    try:
        return AppConfig(
            endpoint=EndpointConfig(**endpoint),
            capture=CaptureConfig(**capture),
            secrets=SecretsConfig(**_section(config, 'secrets')),
            debug=bool(config.get('debug', False)),
        )
    except TypeError as e:
        raise ValueError(f"Invalid config: {e}") from e


def load_config(config_path: Union[Path, str, None] = None) -> AppConfig:
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with open(path) as f:
        config = yaml.safe_load(f)
    app_config = parse_config(config)
    logger.info(f"Loaded config from {path}")
    return app_config


def build_source(capture: CaptureConfig) -> Optional[ImageSource]:
    if capture.source is SourceKind.SCREEN:
        return ScreenImageSource()
    if capture.source is SourceKind.FILE:
        return StaticImageSource(capture.path)
    return None


def build_pipeline(config: AppConfig) -> CapturePipeline:
    transport = OpenRouterTransport(
        url=config.endpoint.url,
        referer=config.endpoint.referer,
        title=config.endpoint.title,
        timeout=config.endpoint.timeout,
    )
    credentials = CredentialStore(config.secrets.path, env_var=config.secrets.env_var)
    pipeline = CapturePipeline(
        credentials,
        transport,
        build_source(config.capture),
        model=config.endpoint.model,
        capture_width=config.capture.width,
        capture_height=config.capture.height,
        default_prompt=config.capture.default_prompt,
    )
    if not credentials.has_key():
        logger.warning(f"No API key found! Set it via PUT /api/v1/credentials or the {config.secrets.env_var} environment variable")
    logger.info(f"initialized capture pipeline for model {config.endpoint.model}")
    return pipeline
