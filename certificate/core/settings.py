"""Editor configuration from the environment, optionally overlaid by a JSON file."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@dataclass
class EditorSettings:
    api_base_url: str = "http://localhost:8000/api"
    asset_base_url: str = ""
    api_token: Optional[str] = None
    timeout: float = 15.0
    language: str = "en"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "EditorSettings":
        if dotenv:
            load_dotenv()
        defaults = cls()
        timeout = os.getenv("CERT_API_TIMEOUT")
        try:
            timeout_value = float(timeout) if timeout else defaults.timeout
        except ValueError:
            logger.warning("Invalid CERT_API_TIMEOUT %r, using %s", timeout, defaults.timeout)
            timeout_value = defaults.timeout
        return cls(
            api_base_url=os.getenv("CERT_API_BASE_URL", defaults.api_base_url),
            asset_base_url=os.getenv("CERT_ASSET_BASE_URL", defaults.asset_base_url),
            api_token=os.getenv("CERT_API_TOKEN") or None,
            timeout=timeout_value,
            language=os.getenv("CERT_LANGUAGE", defaults.language),
        )

    def overlay_file(self, path: str) -> "EditorSettings":
        """Return a copy updated from a JSON settings file; unknown keys are ignored."""
        with open(path, encoding="utf-8") as f:
            loaded = json.load(f)
        if not isinstance(loaded, dict):
            raise ValueError("Settings file must contain a JSON object")
        known = {f.name for f in fields(self)}
        values = asdict(self)
        values.update({k: v for k, v in loaded.items() if k in known})
        return EditorSettings(**values)

    def save(self, path: str) -> None:
        folder = os.path.dirname(path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        data = asdict(self)
        data.pop("api_token", None)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    @property
    def asset_base(self) -> str:
        # uploads are served from the API host unless a CDN base is configured
        if self.asset_base_url:
            return self.asset_base_url
        return self.api_base_url.rstrip("/")
