from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from domain.models import AppConfig, UserProfile

_PLACEHOLDER_PATTERN = re.compile(r"^YOUR_", re.IGNORECASE)
_DEFAULTS = AppConfig()


class FileSystemConfigProvider:
    """Reads config.json and profile.json from a config directory.

    Every public method re-reads from disk so that edits
    to the JSON files take effect without restarting the app.
    Both files are optional; missing ones fall back to defaults.
    """

    def __init__(self, config_dir: str) -> None:
        self._config_dir = Path(config_dir)

    def validate(self) -> list[str]:
        errors: list[str] = []
        config_data = self._validate_json_file(self._config_dir / "config.json", errors)
        profile_data = self._validate_json_file(self._config_dir / "profile.json", errors)

        if config_data is not None:
            errors.extend(self._validate_config_formats(config_data))
        if profile_data is not None:
            errors.extend(self._validate_profile_formats(profile_data))
        return errors

    @staticmethod
    def _validate_config_formats(data: Any) -> list[str]:
        if not isinstance(data, dict):
            return ["config.json must contain a JSON object."]
        errors: list[str] = []
        api_key = data.get("LLM_API_KEY")
        if api_key is not None:
            if not isinstance(api_key, str):
                errors.append("LLM_API_KEY must be a string.")
            elif _PLACEHOLDER_PATTERN.search(api_key):
                errors.append("LLM_API_KEY is a placeholder. Set a real key or remove it to disable the LLM strategy.")

        base_url = data.get("LLM_BASE_URL")
        if base_url is not None and not str(base_url).startswith("https://"):
            errors.append("LLM_BASE_URL must start with 'https://'.")

        model = data.get("LLM_MODEL")
        if model is not None and (not isinstance(model, str) or not model.strip()):
            errors.append("LLM_MODEL must be a non-empty string.")

        db_path = data.get("CACHE_DB_PATH")
        if db_path is not None and (not isinstance(db_path, str) or not db_path.strip()):
            errors.append("CACHE_DB_PATH must be a non-empty string.")

        enabled = data.get("CACHE_ENABLED")
        if enabled is not None and not isinstance(enabled, bool):
            errors.append("CACHE_ENABLED must be a boolean (true/false), not a string.")

        return errors

    @staticmethod
    def _validate_profile_formats(data: Any) -> list[str]:
        if not isinstance(data, dict):
            return ["profile.json must contain a JSON object."]
        return []

    @staticmethod
    def check_upload_files(user_data: Any) -> list[str]:
        """Report profile file paths that do not exist on disk.

        Only needed before generating a script that may upload them, so this
        is kept out of ``validate``.
        """
        cv_path = UserProfile.from_user_data(user_data).cv_path
        if cv_path and not Path(cv_path).is_file():
            return [f"cv_path '{cv_path}' does not exist."]
        return []

    def get_config(self) -> AppConfig:
        data = self._read_json("config.json")
        if not isinstance(data, dict):
            data = {}
        api_key = data.get("LLM_API_KEY")
        if not isinstance(api_key, str) or not api_key or _PLACEHOLDER_PATTERN.search(api_key):
            api_key = None
        return AppConfig(
            llm_api_key=api_key,
            llm_base_url=data.get("LLM_BASE_URL", _DEFAULTS.llm_base_url),
            llm_model=data.get("LLM_MODEL", _DEFAULTS.llm_model),
            cache_db_path=data.get("CACHE_DB_PATH", _DEFAULTS.cache_db_path),
            cache_enabled=bool(data.get("CACHE_ENABLED", _DEFAULTS.cache_enabled)),
        )

    def get_user_data(self) -> dict[str, Any]:
        data = self._read_json("profile.json")
        return data if isinstance(data, dict) else {}

    def get_profile(self) -> UserProfile:
        return UserProfile.from_user_data(self.get_user_data())

    # -- internal helpers ---------------------------------------------------

    def _read_json(self, filename: str) -> Any:
        path = self._config_dir / filename
        if not path.is_file():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    @staticmethod
    def _validate_json_file(path: Path, errors: list[str]) -> Any:
        """Parse an optional JSON file.

        Returns the parsed value, or None if the file is missing or
        unparseable (the latter is reported in ``errors``).
        """
        if not path.is_file():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            errors.append(f"Cannot read {path}: {exc}")
            return None
