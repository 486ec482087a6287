"""Config store: remembers which directory holds the list files."""

import json
import logging
import os
from typing import Optional

from .errors import CorruptData, NoDirectory, TaskIOError
from .models import DEFAULT_CONFIG_PATH, Config
from .storage import write_json

logger = logging.getLogger(__name__)

CONFIG_ENV = "TGO_CONFIG"


def default_config_path() -> str:
    """Config location: $TGO_CONFIG if set, else ~/.task-cli-config.json."""
    raw = os.environ.get(CONFIG_ENV, "").strip()
    return os.path.expanduser(raw) if raw else DEFAULT_CONFIG_PATH


class ConfigStore:
    """Loads and saves the Config document at a fixed per-user path."""

    def __init__(self, path: Optional[str] = None):
        self.path = path or default_config_path()

    def load(self) -> Config:
        """Read the config, creating a default one on first run."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            config = Config()
            try:
                self.save(config)
                logger.info("Created default config at %s", self.path)
            except TaskIOError as exc:
                logger.warning("Could not write default config: %s", exc)
            return config
        except OSError as exc:
            raise TaskIOError(f"Cannot read config {self.path}: {exc}") from exc

        try:
            doc = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CorruptData(f"Config {self.path} is not valid JSON ({exc})") from exc
        if not isinstance(doc, dict):
            raise CorruptData(f"Config {self.path} must be a JSON object")
        folder = doc.get("task_folder", "")
        if not isinstance(folder, str):
            raise CorruptData(f"Config {self.path}: task_folder must be a string")
        return Config(task_folder=folder)

    def save(self, config: Config) -> None:
        write_json(self.path, {"task_folder": config.task_folder})

    def set_task_dir(self, config: Config, path: str) -> str:
        """Point the config at an existing directory and persist it."""
        abs_dir = os.path.abspath(os.path.expanduser(path))
        if not os.path.isdir(abs_dir):
            raise NoDirectory(f"Directory not found: {abs_dir}")
        previous = config.task_folder
        config.task_folder = abs_dir
        try:
            self.save(config)
        except TaskIOError:
            config.task_folder = previous
            raise
        logger.info("Task directory set to %s", abs_dir)
        return abs_dir
