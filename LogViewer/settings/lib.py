"""Settings library for the log viewer.

Provides:
    - Schema validation for the settings dictionary.
    - Loading settings from a JSON file (explicit path or the ``LOGVIEWER_CONFIG`` environment variable).
    - The :class:`Settings` wrapper with typed accessors.

Filter selections are deliberately not part of the settings: they live only as long as the viewer.
"""

import copy
import json
import logging
import os
import pathlib
import tempfile
from typing import Any, Dict, Optional

from . import locale as locale_lib
from ..status import status

app_name: str = 'LogViewer'

CONFIG_ENV_KEY: str = 'LOGVIEWER_CONFIG'

SETTINGS_SCHEMA: Dict[str, Any] = {
    'since_seconds': {'type': int, 'required': False, 'minimum': 0},
    'default_subsystems': {'type': list, 'required': False, 'item_type': str},
    'locale': {'type': str, 'required': False, 'format': 'locale'},
    'app_name': {'type': str, 'required': False},
    'category_implies_subsystem': {'type': bool, 'required': False},
    'export_dir': {'type': str, 'required': False},
    'tank_capacity': {'type': int, 'required': False, 'minimum': 1},
}

DEFAULT_SETTINGS: Dict[str, Any] = {
    'since_seconds': 3600,
    'default_subsystems': [],
    'locale': locale_lib.DEFAULT_LOCALE,
    'app_name': '',
    'category_implies_subsystem': True,
    'export_dir': '',
    'tank_capacity': 10000,
}


def validate_settings(data: Dict[str, Any]) -> None:
    """Validate a settings dictionary against :data:`SETTINGS_SCHEMA`.

    Args:
        data: The settings to validate. Keys may be omitted; unknown keys are rejected.

    Raises:
        status.ConfigInvalidException: If a key is unknown or a value has the wrong type or format.
    """
    logging.debug('Validating settings against schema.')
    if not isinstance(data, dict):
        raise status.ConfigInvalidException(f'Settings must be a dict, got {type(data)}.')

    unknown = set(data) - set(SETTINGS_SCHEMA)
    if unknown:
        raise status.ConfigInvalidException(f'Unknown settings: {sorted(unknown)}.')

    for field, specs in SETTINGS_SCHEMA.items():
        if field not in data:
            if specs['required']:
                raise status.ConfigInvalidException(f'Missing required field: {field}')
            continue

        value = data[field]
        # bool is an int subclass
        if specs['type'] is int and isinstance(value, bool):
            raise status.ConfigInvalidException(f'Field "{field}" must be {int}, got {bool}.')
        if not isinstance(value, specs['type']):
            raise status.ConfigInvalidException(f'Field "{field}" must be {specs["type"]}, got {type(value)}.')

        if 'minimum' in specs and value < specs['minimum']:
            raise status.ConfigInvalidException(f'Field "{field}" must be at least {specs["minimum"]}, got {value}.')

        if 'item_type' in specs:
            for item in value:
                if not isinstance(item, specs['item_type']):
                    raise status.ConfigInvalidException(
                        f'Items of "{field}" must be {specs["item_type"]}, got {type(item)}.'
                    )

        if specs.get('format') == 'locale' and not locale_lib.is_valid_locale(value):
            raise status.ConfigInvalidException(f'Field "{field}" is not a valid locale: "{value}".')

    logging.debug('Settings are valid.')


def load_settings(path: Optional[str] = None) -> Dict[str, Any]:
    """Load settings from a JSON file and merge them over the defaults.

    Args:
        path: Path to a settings file. When omitted the ``LOGVIEWER_CONFIG`` environment variable is
            used, and when that is unset too the defaults are returned.

    Returns:
        The merged settings dictionary.

    Raises:
        status.ConfigInvalidException: If the file is missing, is not valid JSON, or fails validation.
    """
    data = copy.deepcopy(DEFAULT_SETTINGS)

    path = path or os.environ.get(CONFIG_ENV_KEY)
    if not path:
        return data

    settings_path = pathlib.Path(path)
    logging.debug(f'Loading settings from "{settings_path}"')
    if not settings_path.is_file():
        raise status.ConfigInvalidException(f'Settings file not found: {settings_path}')

    try:
        with settings_path.open('r', encoding='utf-8') as f:
            loaded: Any = json.load(f)
    except (OSError, ValueError) as ex:
        raise status.ConfigInvalidException(f'Could not read {settings_path}: {ex}') from ex

    validate_settings(loaded)
    data.update(loaded)
    return data


class Settings:
    """
    Read-only access to the viewer settings.

    Args:
        data: Settings to use. Missing keys fall back to :data:`DEFAULT_SETTINGS`.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None) -> None:
        merged = copy.deepcopy(DEFAULT_SETTINGS)
        if data:
            validate_settings(data)
            merged.update(data)
        self.data: Dict[str, Any] = merged

    @classmethod
    def load(cls, path: Optional[str] = None) -> 'Settings':
        """Returns settings loaded with :func:`load_settings`."""
        return cls(load_settings(path))

    def __getitem__(self, key: str) -> Any:
        if key not in SETTINGS_SCHEMA:
            raise KeyError(f'Invalid settings key: {key}, must be one of {list(SETTINGS_SCHEMA)}')
        return self.data[key]

    @property
    def since_seconds(self) -> int:
        return self.data['since_seconds']

    @property
    def default_subsystems(self) -> list[str]:
        return list(self.data['default_subsystems'])

    @property
    def locale(self) -> str:
        return self.data['locale']

    @property
    def app_name(self) -> str:
        return self.data['app_name']

    @property
    def category_implies_subsystem(self) -> bool:
        return self.data['category_implies_subsystem']

    @property
    def tank_capacity(self) -> int:
        return self.data['tank_capacity']

    @property
    def export_dir(self) -> pathlib.Path:
        """The directory archives are written to; the system temp dir when not configured."""
        if self.data['export_dir']:
            return pathlib.Path(self.data['export_dir'])
        return pathlib.Path(tempfile.gettempdir())
