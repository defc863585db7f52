"""Settings library for the client configuration.

Provides:
    - Schema validation and enforcement for client.json structure.
    - Loading, saving, reverting, and managing application settings.
    - Constants shared by the transaction cache and the transaction panels.
"""

import json
import logging
import pathlib
import re
import shutil
from typing import Dict, Any, Optional, List

from PySide6 import QtCore, QtWidgets

from ..status import status

app_name: str = 'BudgetBar'

#: Number of transactions fetched when a budget bar is first expanded.
INITIAL_COUNT: int = 3
#: Number of transactions fetched by every subsequent "show more" or scroll page.
BATCH_SIZE: int = 10
#: Maximum height in pixels of a revealed, auto-loading transaction list.
SCROLL_CONTAINER_MAX_HEIGHT: int = 280
#: Distance in pixels from the bottom of a revealed list that triggers the next page.
SCROLL_LOAD_THRESHOLD: int = 40

METADATA_KEYS: List[str] = [
    'name',
    'locale',
    'currency',
    'yearmonth',
    'theme',
]

CLIENT_SCHEMA: Dict[str, Any] = {
    'api': {
        'type': dict,
        'required': True,
        'item_schema': {
            'base_url': {'type': str, 'required': True, 'format': 'url'},
            'timeout': {'type': float, 'required': True},
        }
    },
    'metadata': {
        'type': dict,
        'required': True,
        'required_keys': METADATA_KEYS,
        'item_schema': {
            'name': {'type': str, 'required': True},
            'locale': {'type': str, 'required': True},
            'currency': {'type': str, 'required': True},
            'yearmonth': {'type': str, 'required': True, 'format': 'yearmonth'},
            'theme': {'type': str, 'required': True},
        }
    },
}


def is_valid_yearmonth(value: str) -> bool:
    """Check if a string is empty or a "YYYY-MM" month.

    Args:
        value (str): Month string to validate.

    Returns:
        bool: True if value is empty or matches 'YYYY-MM', False otherwise.
    """
    return not value or bool(re.fullmatch(r'\d{4}-(0[1-9]|1[0-2])', value))


def is_valid_url(value: str) -> bool:
    """Check if a string looks like an http(s) base url."""
    return bool(re.fullmatch(r'https?://[^\s/]+(/[^\s]*)?', value))


def _validate_section(section_name: str, section: Dict[str, Any], item_schema: Dict[str, Any]) -> None:
    """Validate a section of the client configuration against its item schema.

    Integers are accepted where floats are expected.

    Args:
        section_name: Name of the section, used in error messages.
        section: The section data.
        item_schema: Dict describing required fields, types, and format constraints.

    Raises:
        TypeError: If a field has the wrong type.
        ValueError: If a required field is missing or fails format validation.
    """
    logging.debug(f'Validating "{section_name}" section.')
    for field, field_specs in item_schema.items():
        if field_specs['required'] and field not in section:
            msg = f'Section "{section_name}" missing "{field}".'
            logging.error(msg)
            raise ValueError(msg)
        if field not in section:
            continue

        _type = field_specs['type']
        value = section[field]
        if _type is float and isinstance(value, int) and not isinstance(value, bool):
            value = float(value)
            section[field] = value
        if not isinstance(value, _type):
            msg = (
                f'Section "{section_name}" field "{field}" must be {_type}, '
                f'got {type(value)}.'
            )
            logging.error(msg)
            raise TypeError(msg)

        fmt = field_specs.get('format')
        if fmt == 'url' and not is_valid_url(value):
            msg = f'Section "{section_name}" field "{field}" must be an http(s) url, got "{value}".'
            logging.error(msg)
            raise ValueError(msg)
        if fmt == 'yearmonth' and not is_valid_yearmonth(value):
            msg = f'Section "{section_name}" field "{field}" must be "YYYY-MM", got "{value}".'
            logging.error(msg)
            raise ValueError(msg)


class ConfigPaths:
    """Manage application file paths and ensure the default client template is in place.

    The configuration lives in the per-user application data directory reported by
    :class:`QtCore.QStandardPaths`. On first use the bundled template is copied there.
    """

    def __init__(self) -> None:
        QtWidgets.QApplication.setApplicationName(app_name)
        QtWidgets.QApplication.setOrganizationName('')
        logging.debug(f'Setting application name: {app_name}')

        p = QtCore.QStandardPaths.writableLocation(QtCore.QStandardPaths.AppDataLocation)
        app_data_dir = pathlib.Path(p)
        logging.debug(f'Using app data directory: {app_data_dir}')

        self.template_dir: pathlib.Path = pathlib.Path(__file__).parent.parent / 'config'
        self.client_template: pathlib.Path = self.template_dir / 'client.json.template'

        self.config_dir: pathlib.Path = app_data_dir / 'config'
        self.client_path: pathlib.Path = self.config_dir / 'client.json'

        self._verify_and_prepare()

    def _verify_and_prepare(self) -> None:
        """Verify the template exists and prepare the configuration directory and file.

        Raises:
            FileNotFoundError: If the template directory or file is missing.
        """
        logging.debug(f'Verifying required templates in {self.template_dir}')
        if not self.template_dir.exists():
            msg: str = f'Missing template directory: {self.template_dir}'
            logging.error(msg)
            raise FileNotFoundError(msg)
        if not self.client_template.exists():
            msg = f'Missing client template: {self.client_template}'
            logging.error(msg)
            raise FileNotFoundError(msg)

        if not self.config_dir.exists():
            logging.debug(f'Creating config directory: {self.config_dir}')
            self.config_dir.mkdir(parents=True, exist_ok=True)

        if not self.client_path.exists():
            logging.debug(f'Copying default client config from template to {self.client_path}')
            shutil.copy(self.client_template, self.client_path)

    def revert_client_to_template(self) -> None:
        """Restore client.json from the default template file.

        Raises:
            FileNotFoundError: If the client template file is missing.
        """
        logging.debug(f'Reverting client config to template: {self.client_template}')
        if not self.client_template.exists():
            msg: str = f'Client template not found: {self.client_template}'
            logging.error(msg)
            raise FileNotFoundError(msg)
        shutil.copy(self.client_template, self.client_path)


class SettingsAPI(ConfigPaths):
    """
    Provides an interface to get/set/revert/save client.json sections.
    """

    def __init__(self, client_path: Optional[str] = None) -> None:
        """Initialize SettingsAPI and load the client data.

        Args:
            client_path: Optional path to a custom client.json file.
        """
        super().__init__()

        self.client_path: pathlib.Path = pathlib.Path(client_path) if client_path else self.client_path

        self._signals_blocked: bool = False

        self.client_data: Dict[str, Any] = {}
        for k in CLIENT_SCHEMA.keys():
            self.client_data[k] = {}

        self.init_data()

    def __getitem__(self, key: str) -> Any:
        """Retrieve a metadata value using dictionary-style access.

        Args:
            key: Metadata key to retrieve.

        Returns:
            Value stored for the metadata key.

        Raises:
            KeyError: If key is not in METADATA_KEYS.
        """
        if key not in METADATA_KEYS:
            raise KeyError(f'Invalid metadata key: {key}, must be one of {METADATA_KEYS}')

        _type = CLIENT_SCHEMA['metadata']['item_schema'][key]['type']
        v = self.client_data['metadata'].get(key)

        if not isinstance(v, _type):
            logging.error(f'Metadata key "{key}" is not of type {_type}, got {type(v)}.')
            return None

        return v

    def __setitem__(self, key: str, value: Any) -> None:
        """Assign a metadata value using dictionary-style access and persist it.

        Args:
            key: Metadata key to set.
            value: Value to assign to the metadata key.

        Raises:
            KeyError: If key is not in METADATA_KEYS.
            ValueError: If the value fails format validation.
        """
        if key not in METADATA_KEYS:
            raise KeyError(f'Invalid metadata key: {key}, must be one of {METADATA_KEYS}')

        if not isinstance(value, str):
            logging.warning(f'Metadata key "{key}" is not of type {str}, got {type(value)}.')
            value = str(value)

        new_data = dict(self.client_data['metadata'])
        new_data[key] = value
        _validate_section('metadata', new_data, CLIENT_SCHEMA['metadata']['item_schema'])

        self.client_data['metadata'] = new_data
        self.save_section('metadata')

        if self._signals_blocked:
            return

        from ..ui.actions import signals
        signals.metadataChanged.emit(key, value)

    def block_signals(self, v: bool) -> None:
        """Enable or disable emission of configuration change signals.

        Args:
            v: True to block signals, False to allow signals to emit.
        """
        self._signals_blocked = v

    @QtCore.Slot()
    def init_data(self) -> None:
        """Reload client data from disk."""
        self.load_client()

    def load_client(self) -> Dict[str, Any]:
        """Load client.json from disk and validate against schema.

        Returns:
            The loaded client data dictionary.

        Raises:
            status.ClientConfigNotFoundException: If client.json file is missing.
            status.ClientConfigInvalidException: If JSON parsing or validation fails.
        """
        logging.debug(f'Loading client config from "{self.client_path}"')
        if not self.client_path.exists():
            raise status.ClientConfigNotFoundException

        try:
            with self.client_path.open('r', encoding='utf-8') as f:
                data: Dict[str, Any] = json.load(f)
            self.validate_client_data(data)
        except (ValueError, TypeError) as ex:
            raise status.ClientConfigInvalidException(str(ex)) from ex

        self.client_data = data
        return self.client_data

    def validate_client_data(self, data: Dict[str, Any] = None) -> None:
        """Validate client data against the defined CLIENT_SCHEMA.

        Args:
            data (dict, optional): Client data to validate. Defaults to self.client_data.

        Raises:
            ValueError: If a required section or key is missing, or a value is malformed.
            TypeError: If a section or value has the wrong type.
        """
        if data is None:
            data = self.client_data

        logging.debug('Validating client data against schema.')
        for field, specs in CLIENT_SCHEMA.items():
            if specs.get('required') and field not in data:
                msg: str = f'Missing required section: {field}'
                logging.error(msg)
                raise ValueError(msg)
            if not isinstance(data[field], specs['type']):
                msg = f'Section "{field}" must be {specs["type"]}, got {type(data[field])}.'
                logging.error(msg)
                raise TypeError(msg)

            missing = [k for k in specs.get('required_keys', []) if k not in data[field]]
            if missing:
                msg = f'Section "{field}" is missing keys: {missing}'
                logging.error(msg)
                raise ValueError(msg)

            _validate_section(field, data[field], specs['item_schema'])
        logging.debug('Client data is valid.')

    def get_section(self, section_name: str) -> Dict[str, Any]:
        """Retrieve a copy of configuration data for a client section.

        Args:
            section_name: Section name, a key of CLIENT_SCHEMA.

        Returns:
            A copied dict of the requested section data.

        Raises:
            KeyError: If section_name is not in client_data.
        """
        return self.client_data[section_name].copy()

    def set_section(self, section_name: str, new_data: Dict[str, Any]) -> None:
        """Replace, validate and persist a configuration section.

        Args:
            section_name: Section to update.
            new_data: New data dict for the section.

        Raises:
            ValueError: If section_name is unrecognized or the data fails validation.
            TypeError: If the data has the wrong type.
        """
        if section_name not in CLIENT_SCHEMA:
            msg: str = f'Unknown section_name for set: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        current_section_data: Dict[str, Any] = self.client_data.get(section_name).copy()
        self.client_data[section_name] = dict(new_data)
        try:
            self.validate_client_data()
            self.save_section(section_name)
        except (ValueError, TypeError) as e:
            logging.error(f'Validation error on set_section("{section_name}"): {e}')
            self.client_data[section_name] = current_section_data
            raise

        if self._signals_blocked:
            return

        from ..ui.actions import signals
        signals.configSectionChanged.emit(section_name)

    def revert_section(self, section_name: str) -> None:
        """Revert a configuration section to its template default and save.

        Args:
            section_name: Section to revert.

        Raises:
            ValueError: If section_name is invalid or not present in the template.
        """
        if section_name not in CLIENT_SCHEMA:
            msg: str = f'Unknown section_name for revert: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        with self.client_template.open('r', encoding='utf-8') as f:
            template_data: Dict[str, Any] = json.load(f)

        if section_name not in template_data:
            msg = f'No template-based revert logic for section "{section_name}".'
            logging.error(msg)
            raise ValueError(msg)

        self.client_data[section_name] = template_data[section_name]
        self.save_section(section_name)

        if self._signals_blocked:
            return

        from ..ui.actions import signals
        signals.configSectionChanged.emit(section_name)

    def save_section(self, section_name: str) -> None:
        """Persist a single configuration section to client.json.

        Args:
            section_name: The section to save.

        Raises:
            ValueError: If section_name is not recognized.
        """
        if section_name not in CLIENT_SCHEMA:
            msg: str = f'Unknown section_name for save: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        logging.debug(f'Saving section "{section_name}" to "{self.client_path}"')
        with self.client_path.open('r', encoding='utf-8') as f:
            original_data: Dict[str, Any] = json.load(f)

        new_data: Dict[str, Any] = original_data.copy()
        new_data[section_name] = self.client_data[section_name]
        with self.client_path.open('w', encoding='utf-8') as f:
            json.dump(new_data, f, indent=4, ensure_ascii=False)


settings: Optional[SettingsAPI] = None


def get_settings() -> SettingsAPI:
    """Return the shared SettingsAPI, creating it on first use."""
    global settings
    if settings is None:
        settings = SettingsAPI()
    return settings
