"""
Local Configuration Source: reads .env files.

Naming contract: production reads `.env`, every other environment reads
`.env.<environment>`. Parsing is python-dotenv's; when a key appears more
than once the last occurrence wins, and a bare `KEY` line loads as "".
"""

from pathlib import Path
from typing import Dict, List, Union

from dotenv import dotenv_values

from .exceptions import MissingLocalFile, ValidationError
from .models import ConfigEntry, is_production
from .log_manager import get_logger


def env_file_name(environment: str) -> str:
    """File name holding the settings for an environment"""
    return ".env" if is_production(environment) else f".env.{environment}"


class LocalConfigSource:
    """Loads key/value entries from env files in a project directory"""

    def __init__(self, project_dir: Union[str, Path]):
        self.project_dir = Path(project_dir)
        self.logger = get_logger('LocalConfigSource', component='manager')

    def path_for(self, environment: str) -> Path:
        return self.project_dir / env_file_name(environment)

    def load(self, path: Union[str, Path]) -> Dict[str, str]:
        """
        Parse an env file.

        Args:
            path: File to read

        Returns:
            Mapping of key to value in file order

        Raises:
            MissingLocalFile: if the file does not exist
            ValidationError: if the file cannot be decoded or read
        """
        path = Path(path)
        if not path.is_file():
            raise MissingLocalFile(path)

        try:
            # interpolate=False keeps ${VAR} references as literal text
            values = dotenv_values(path, interpolate=False, encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise ValidationError(f"Cannot read environment file {path}: {e}") from e
        entries = {key: ("" if value is None else value) for key, value in values.items()}
        self.logger.info(f"Loaded {len(entries)} entries from {path.name}")
        return entries

    def load_entries(self, environment: str) -> List[ConfigEntry]:
        """
        Load the file for an environment as ConfigEntry objects

        Raises:
            MissingLocalFile, ValidationError: as for `load`; also ValidationError
                when the file defines no settings
        """
        path = self.path_for(environment)
        entries = [ConfigEntry(key, value) for key, value in self.load(path).items()]
        if not entries:
            raise ValidationError(f"Environment file {path} has no settings to upload")
        return entries
