import json
import logging
import os
import shutil
import time
from typing import Dict, Any, Optional
from .schemas import (
    ConfigSchema,
    ServerConfig,
    StreamConfig,
    GeneratorConfig,
    LoggingConfig,
)
from pydantic import ValidationError

logger = logging.getLogger(__name__)


class ConfigManager:

    def __init__(self, config_filename: str = "config.json", data_dir: Optional[str] = None):
        if data_dir:
            self.data_dir = data_dir
        else:
            self.data_dir = os.path.join(os.getcwd(), "data")

        self.config_path = os.path.join(self.data_dir, config_filename)

        self._ensure_data_dir()
        self._config_obj = self.load_config()

    def _ensure_data_dir(self):
        if not os.path.exists(self.data_dir):
            os.makedirs(self.data_dir, exist_ok=True)

    @property
    def config(self) -> Dict[str, Any]:
        """Return the configuration as a dictionary."""
        return self._config_obj.model_dump()

    @property
    def server(self) -> ServerConfig:
        return self._config_obj.server

    @property
    def stream(self) -> StreamConfig:
        return self._config_obj.stream

    @property
    def generator(self) -> GeneratorConfig:
        return self._config_obj.generator

    @property
    def logging(self) -> LoggingConfig:
        return self._config_obj.logging

    def load_config(self) -> ConfigSchema:
        """
        Load the config file, validate it, and repair what is invalid.
        Writes back to disk only when repairs or defaults were applied.
        """
        raw_data = self._read_raw_json()

        try:
            config_obj = ConfigSchema.model_validate(raw_data)
        except ValidationError as e:
            logger.warning(f"[Config] Validation failed in {self.config_path}, attempting repair...")
            for error in e.errors():
                logger.warning(f"  - {'.'.join(str(i) for i in error['loc'])}: {error['msg']}")
            config_obj = self._repair_config(raw_data)

        if raw_data != config_obj.model_dump():
            logger.info(f"[Config] Synchronizing repairs or defaults to {self.config_path}")
            self.save_config(config_obj)

        return config_obj

    def _read_raw_json(self) -> Dict[str, Any]:
        """Read and decode the JSON file, backing it up if it is corrupt."""
        if not os.path.exists(self.config_path):
            return {}

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"[Config] Error reading JSON {self.config_path}: {e}")
            self._backup_corrupt_file()
            return {}

    def _backup_corrupt_file(self):
        timestamp = int(time.time())
        backup_path = f"{self.config_path}.corrupt.{timestamp}"
        logger.warning(f"[Config] Backing up corrupt config to {backup_path}")
        try:
            shutil.copy(self.config_path, backup_path)
        except OSError as e:
            logger.error(f"[Config] Backup failed: {e}")

    def _repair_config(self, data: Any) -> ConfigSchema:
        """Repair by delegating to each section's own load_best_effort."""
        if not isinstance(data, dict):
            return ConfigSchema()

        repaired_data = {}
        for section_name, field_info in ConfigSchema.model_fields.items():
            section_type = field_info.annotation
            repaired_data[section_name] = section_type.load_best_effort(
                data.get(section_name)
            )

        return ConfigSchema(**repaired_data)

    def save_config(self, config_obj: Optional[ConfigSchema] = None):
        obj = config_obj if config_obj is not None else self._config_obj
        data = obj.model_dump()

        path_dir = os.path.dirname(self.config_path)
        if path_dir:
            os.makedirs(path_dir, exist_ok=True)

        try:
            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=4, ensure_ascii=False)
                f.flush()
                try:
                    os.fsync(f.fileno())
                except OSError:
                    pass
        except OSError as e:
            logger.error(f"[Config] Failed to save {self.config_path}: {e}")
            raise

    def get(self, key: str, default=None):
        """Get a value by dot notation (e.g. 'server.host')."""
        value = self.config
        try:
            for k in key.split("."):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def update(self, key: str, value: Any) -> bool:
        """
        Update a value by dot notation and save.
        Returns True if successful, False if validation fails.
        """
        current_data = self._config_obj.model_dump()

        keys = key.split(".")
        target = current_data
        try:
            for k in keys[:-1]:
                target = target[k]
            if keys[-1] not in target:
                raise KeyError(keys[-1])

            logger.info(f"[Config] Updating {key} to {value} (type: {type(value).__name__})")
            target[keys[-1]] = value

            new_obj = ConfigSchema(**current_data)
            self._config_obj = new_obj
            self.save_config()
            return True
        except (ValidationError, KeyError, TypeError, ValueError) as e:
            if isinstance(e, ValidationError):
                logger.warning(f"[Config] Update rejected for '{key}': Validation failed.")
                for error in e.errors():
                    logger.warning(f"  - {'.'.join(str(i) for i in error['loc'])}: {error['msg']}")
            else:
                logger.warning(f"[Config] Update rejected for '{key}': {e}")
            return False
