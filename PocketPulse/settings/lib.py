"""Settings library for the tracker configuration.

Provides:
    - Schema validation and enforcement for the tracker.json structure.
    - Loading, saving, reverting, and managing application settings.
    - Constants for transaction columns and defaults.
"""

import json
import logging
import pathlib
import re
import shutil
from typing import Dict, Any, Optional, List

from PySide6 import QtCore, QtWidgets

from ..status import status

app_name: str = 'PocketPulse'

DEFAULT_BASE_URL: str = 'http://localhost:4000'
DEFAULT_TIMEOUT: float = 10.0

DRAFT_DATA_COLUMNS: List[str] = ['type', 'amount', 'category', 'date', 'description']
SERIES_DAYS: int = 7

API_KEYS: List[str] = [
    'base_url',
    'timeout',
]

METADATA_KEYS: List[str] = [
    'name',
    'locale',
    'currency',
    'fallback_symbol',
    'theme',
]

TRACKER_SCHEMA: Dict[str, Any] = {
    'api': {
        'type': dict,
        'required': True,
        'required_keys': API_KEYS,
        'item_schema': {
            'base_url': {'type': str, 'required': True, 'format': 'url'},
            'timeout': {'type': (int, float), 'required': True},
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
            'fallback_symbol': {'type': str, 'required': True},
            'theme': {'type': str, 'required': True},
        }
    },
}


def is_valid_url(value: str) -> bool:
    """Check if a string looks like an http(s) base URL.

    Args:
        value (str): URL string to validate.

    Returns:
        bool: True if value starts with http:// or https:// followed by a host.
    """
    return bool(re.fullmatch(r'https?://[^\s/]+(/\S*)?', value or ''))


def _validate_items(section: str, section_dict: Dict[str, Any], specs: Dict[str, Any]) -> None:
    """Validate a flat section of the tracker configuration against its item schema.

    Args:
        section: Name of the section, used in error messages.
        section_dict: The section data.
        specs: Schema dict containing 'required_keys' and 'item_schema'.

    Raises:
        ValueError: If a required key is missing or fails format validation.
        TypeError: If a value is not of the expected type.
    """
    logging.debug(f'Validating "{section}" section.')
    missing = [k for k in specs['required_keys'] if k not in section_dict]
    if missing:
        msg: str = f'"{section}" is missing required keys: {missing}.'
        logging.error(msg)
        raise ValueError(msg)

    for key, field_specs in specs['item_schema'].items():
        if key not in section_dict:
            continue
        value = section_dict[key]
        # bool is an int subclass but never a valid number here
        if isinstance(value, bool) or not isinstance(value, field_specs['type']):
            msg = f'"{section}" field "{key}" must be {field_specs["type"]}, got {type(value)}.'
            logging.error(msg)
            raise TypeError(msg)
        if field_specs.get('format') == 'url' and not is_valid_url(value):
            msg = f'"{section}" field "{key}" must be a valid http(s) URL, got "{value}".'
            logging.error(msg)
            raise ValueError(msg)


def _validate_api(api_dict: Dict[str, Any], specs: Dict[str, Any]) -> None:
    """Validate the 'api' section: schema plus a positive timeout.

    Raises:
        ValueError: If the timeout is not a positive number.
    """
    _validate_items('api', api_dict, specs)
    if api_dict['timeout'] <= 0:
        msg: str = f'"api" field "timeout" must be greater than 0, got {api_dict["timeout"]}.'
        logging.error(msg)
        raise ValueError(msg)


class ConfigPaths:
    """Manage application file paths and ensure default templates and directories exist.

    This class initializes paths for the configuration template, stylesheet and
    user configuration. It verifies the presence of template assets and prepares
    the default configuration file by copying it into the user data directory.
    """

    def __init__(self) -> None:
        # Set the application name and organization
        QtWidgets.QApplication.setApplicationName(app_name)
        QtWidgets.QApplication.setOrganizationName('')
        logging.debug(f'Setting application name: {app_name}')

        # Get the app data directory
        p = QtCore.QStandardPaths.writableLocation(QtCore.QStandardPaths.AppDataLocation)
        app_data_dir = pathlib.Path(p)
        logging.debug(f'Using app data directory: {app_data_dir}')

        self.template_dir: pathlib.Path = pathlib.Path(__file__).parent.parent / 'config'
        self.tracker_template: pathlib.Path = self.template_dir / 'tracker.json.template'
        self.stylesheet_path: pathlib.Path = self.template_dir / 'stylesheet.qss'

        self.config_dir: pathlib.Path = app_data_dir / 'config'
        self.tracker_path: pathlib.Path = self.config_dir / 'tracker.json'

        self._verify_and_prepare()

    def _verify_and_prepare(self) -> None:
        """Verify templates exist and prepare the configuration directory and file.

        Raises:
            FileNotFoundError: If the template directory or a template file is missing.
        """
        logging.debug(f'Verifying required directories and templates in {self.template_dir}')
        if not self.template_dir.exists():
            msg: str = f'Missing template directory: {self.template_dir}'
            logging.error(msg)
            raise FileNotFoundError(msg)
        if not self.tracker_template.exists():
            msg = f'Missing tracker template: {self.tracker_template}'
            logging.error(msg)
            raise FileNotFoundError(msg)

        if not self.config_dir.exists():
            logging.debug(f'Creating config directory: {self.config_dir}')
            self.config_dir.mkdir(parents=True, exist_ok=True)

        # Ensure a valid config exists even if we haven't yet set it up
        if not self.tracker_path.exists():
            logging.debug(f'Copying default tracker config from template to {self.tracker_path}')
            shutil.copy(self.tracker_template, self.tracker_path)

    def revert_tracker_to_template(self) -> None:
        """Restore tracker.json from the default template file.

        Raises:
            FileNotFoundError: If the tracker template file is missing.
        """
        logging.debug(f'Reverting tracker config to template: {self.tracker_template}')
        if not self.tracker_template.exists():
            msg: str = f'Tracker template not found: {self.tracker_template}'
            logging.error(msg)
            raise FileNotFoundError(msg)
        shutil.copy(self.tracker_template, self.tracker_path)


class SettingsAPI(ConfigPaths):
    """
    Provides an interface to get/set/revert/save tracker.json sections.
    """

    def __init__(self, tracker_path: Optional[str] = None) -> None:
        """Initialize SettingsAPI and load the tracker configuration.

        Args:
            tracker_path: Optional path to a custom tracker.json file.
        """
        super().__init__()

        self.tracker_path: pathlib.Path = pathlib.Path(tracker_path) if tracker_path else self.tracker_path

        self._signals_blocked: bool = False

        self.tracker_data: Dict[str, Any] = {k: {} for k in TRACKER_SCHEMA}

        self.init_data()

    def __getitem__(self, key: str) -> Any:
        """Retrieve a metadata value using dictionary-style access.

        Args:
            key: Metadata key to retrieve.

        Returns:
            Value stored for the metadata key, or None if it has the wrong type.

        Raises:
            KeyError: If key is not in METADATA_KEYS.
        """
        if key not in METADATA_KEYS:
            raise KeyError(f'Invalid metadata key: {key}, must be one of {METADATA_KEYS}')

        _type = TRACKER_SCHEMA['metadata']['item_schema'][key]['type']
        v = self.tracker_data.get('metadata', {}).get(key)

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
        """
        if key not in METADATA_KEYS:
            raise KeyError(f'Invalid metadata key: {key}, must be one of {METADATA_KEYS}')

        if not isinstance(value, str):
            logging.warning(f'Metadata key "{key}" is not of type {str}, got {type(value)}.')
            value = str(value)

        self.tracker_data['metadata'][key] = value
        self.save_section('metadata')

        if self._signals_blocked:
            return

        from ..ui.actions import signals
        signals.metadataChanged.emit(key, value)

    def block_signals(self, v: bool) -> None:
        """Enable or disable emission of configuration change signals."""
        self._signals_blocked = v

    @QtCore.Slot()
    def init_data(self) -> None:
        """Reload the tracker config, emitting UI update signals."""
        self.load_tracker()

        if self._signals_blocked:
            return

        from ..ui.actions import signals
        signals.configSectionChanged.emit('api')
        for k, v in self.tracker_data.get('metadata', {}).items():
            signals.metadataChanged.emit(k, v)

    def load_tracker(self) -> Dict[str, Any]:
        """Load tracker.json from disk and validate against schema.

        Returns:
            The loaded tracker data dictionary.

        Raises:
            status.TrackerConfigNotFoundException: If tracker.json file is missing.
            status.TrackerConfigInvalidException: If JSON parsing or validation fails.
        """
        logging.debug(f'Loading tracker config from "{self.tracker_path}"')
        if not self.tracker_path.exists():
            raise status.TrackerConfigNotFoundException

        try:
            with self.tracker_path.open('r', encoding='utf-8') as f:
                data: Dict[str, Any] = json.load(f)
            self.validate_tracker_data(data)
        except (ValueError, TypeError) as ex:
            raise status.TrackerConfigInvalidException(str(ex)) from ex

        self.tracker_data = data
        return self.tracker_data

    def validate_tracker_data(self, data: Dict[str, Any] = None) -> None:
        """Validate tracker data against TRACKER_SCHEMA.

        Args:
            data (dict, optional): Tracker data to validate. Defaults to self.tracker_data.

        Raises:
            ValueError: If data is empty, a section is missing, or a value is invalid.
            TypeError: If a section or value has the wrong type.
        """
        if data is None:
            data = self.tracker_data
        if not data:
            raise ValueError('Tracker data is empty.')

        logging.debug('Validating tracker data against schema.')
        for field, specs in TRACKER_SCHEMA.items():
            if specs.get('required') and field not in data:
                raise ValueError(f'Missing required field: {field}')

            if not isinstance(data[field], specs['type']):
                raise TypeError(f'Field "{field}" must be {specs["type"]}, got {type(data[field])}.')

            if field == 'api':
                _validate_api(data[field], specs)
            else:
                _validate_items(field, data[field], specs)

        logging.debug('Tracker data is valid.')

    def get_section(self, section_name: str) -> Dict[str, Any]:
        """Retrieve a copy of configuration data for a section.

        Raises:
            KeyError: If section_name is not in tracker_data.
        """
        return self.tracker_data[section_name].copy()

    def set_section(self, section_name: str, new_data: Dict[str, Any]) -> None:
        """Replace, validate and persist a configuration section.

        The previous section data is restored if validation fails.

        Args:
            section_name: Section to update.
            new_data: New data dict for the section.

        Raises:
            ValueError: If section_name is unrecognized or validation fails.
            TypeError: If a value has the wrong type.
        """
        if section_name not in self.tracker_data:
            msg: str = f'Unknown section_name for set: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        current_section_data: Dict[str, Any] = self.tracker_data[section_name].copy()

        self.tracker_data[section_name] = new_data
        try:
            self.validate_tracker_data()
        except (ValueError, TypeError) as e:
            logging.error(f'Validation error on set_section("{section_name}"): {e}')
            self.tracker_data[section_name] = current_section_data
            raise

        self.save_section(section_name)
        if self._signals_blocked:
            return

        from ..ui.actions import signals
        signals.configSectionChanged.emit(section_name)

    def revert_section(self, section_name: str) -> None:
        """Revert a configuration section to its template default and save.

        Raises:
            ValueError: If section_name is invalid or not present in the template.
        """
        if section_name not in self.tracker_data:
            msg: str = f'Unknown section_name for revert: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        with self.tracker_template.open('r', encoding='utf-8') as f:
            template_data: Dict[str, Any] = json.load(f)

        if section_name not in template_data:
            msg = f'No template-based revert logic for section "{section_name}".'
            logging.error(msg)
            raise ValueError(msg)

        self.tracker_data[section_name] = template_data[section_name]
        self.save_section(section_name)

        if self._signals_blocked:
            return

        from ..ui.actions import signals
        signals.configSectionChanged.emit(section_name)

    def save_section(self, section_name: str) -> None:
        """Persist a single configuration section to tracker.json.

        Raises:
            ValueError: If section_name is not recognized.
        """
        if section_name not in self.tracker_data:
            msg: str = f'Unknown section_name for save: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        with self.tracker_path.open('r', encoding='utf-8') as f:
            original_data: Dict[str, Any] = json.load(f)

        new_data: Dict[str, Any] = original_data.copy()
        new_data[section_name] = self.tracker_data[section_name]

        logging.debug(f'Saving section "{section_name}" to "{self.tracker_path}"')
        with self.tracker_path.open('w', encoding='utf-8') as f:
            json.dump(new_data, f, indent=4, ensure_ascii=False)


settings: SettingsAPI = SettingsAPI()
