"""
API key storage.

Keys live in a small JSON file kept outside version control; when the file has
no key the OPENROUTER_API_KEY environment variable is used instead.
"""
from __future__ import annotations
from pathlib import Path
from typing import Optional, Union
import logging
import os

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

PLACEHOLDER_KEY = "YOUR_OPENROUTER_API_KEY"
DEFAULT_SECRETS_PATH = Path.home() / ".passthrough_vlm" / "secrets.json"


class SecretsData(BaseModel):
    openrouter_api_key: str = ""


class CredentialStore:
    def __init__(self, path: Optional[Union[str, Path]] = None, env_var: str = "OPENROUTER_API_KEY"):
        self.path = Path(path) if path else DEFAULT_SECRETS_PATH
        self.env_var = env_var
        self._data: Optional[SecretsData] = None

    def _load(self) -> SecretsData:
        if self._data is not None:
            return self._data

        self._data = SecretsData()
        if not self.path.exists():
            logger.debug(f"No secrets file at {self.path}")
            return self._data

        try:
            text = self.path.read_text(encoding="utf-8")
            if text.strip():
                self._data = SecretsData.model_validate_json(text)
                logger.info("Secrets loaded successfully")
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            logger.warning(f"Error loading secrets from {self.path}, using empty secrets: {e}")
        return self._data

    def get(self) -> Optional[str]:
        """Stored key, falling back to the environment. Never raises."""
        key = self._load().openrouter_api_key
        if key:
            return key
        return os.environ.get(self.env_var) or None

    def set(self, api_key: str) -> None:
        data = self._load().model_copy(update={"openrouter_api_key": api_key})
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(data.model_dump_json(indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Error saving secrets to {self.path}: {e}")
            raise
        self._data = data
        logger.info(f"API key {redact(api_key)} saved to {self.path}")

    def has_key(self) -> bool:
        key = self.get()
        return bool(key) and key != PLACEHOLDER_KEY


def redact(key: Optional[str], visible: int = 8) -> str:
    if not key:
        return "<none>"
    return key[:visible] + "..."
