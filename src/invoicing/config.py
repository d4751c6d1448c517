"""
Settings for invoice generation and rendering.

Defaults mirror the fixed values printed on every invoice. They can be
overridden from a YAML file and then from environment variables.
"""

import os
import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
DEFAULT_CONFIG_PATH = os.path.join(PROJECT_ROOT, "config", "invoice_settings.yml")
DEFAULT_DRIVER_NAMES_PATH = os.path.join(PROJECT_ROOT, "data", "karnataka_driver_names.txt")


@dataclass(frozen=True)
class InvoiceSettings:
    """Invoice generation and layout settings."""
    invoice_number_prefix: str = "FFCDCBIA24"
    driver_names_source: str = DEFAULT_DRIVER_NAMES_PATH
    driver_names_timeout: float = 10.0

    # Bulk form defaults
    default_min_price: float = 100.0
    default_max_price: float = 200.0
    default_count: int = 10
    max_count: int = 100

    # Printed invoice details
    place_of_supply: str = "Karnataka"
    hsn_code: str = "996412"
    service_category: str = "Passenger Transport Services"
    service_description: str = "Transportation service fare"
    reverse_charge: str = "No"
    issuer_name: str = "Uber India Systems Private Limited"
    driver_city: str = "Bangalore"
    driver_country: str = "India"
    eco_address: str = (
        "Prabhas Legacy, 2nd Floor, # 77, Survey no. 124/2 N.A.L Wind Tunnel Road, "
        "Murugeshpalya, H.A.L POST Bangalore, Karnataka"
    )
    eco_gstin: str = "29AABCU6223H2Z9"


# Environment variable -> settings field
ENV_OVERRIDES = {
    "INVOICE_NUMBER_PREFIX": "invoice_number_prefix",
    "DRIVER_NAMES_SOURCE": "driver_names_source",
    "DRIVER_NAMES_TIMEOUT": "driver_names_timeout",
}


def _coerce(settings: InvoiceSettings, values: Dict[str, Any]) -> Dict[str, Any]:
    """Drop unknown keys and cast values to the declared field types."""
    known = {f.name: f for f in fields(settings)}
    coerced = {}
    for key, value in values.items():
        if key not in known:
            logger.warning(f"Ignoring unknown invoice setting: {key}")
            continue
        current = getattr(settings, key)
        try:
            coerced[key] = type(current)(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid value for {key}: {value!r}, keeping {current!r}")
    return coerced


def load_settings(config_path: Optional[str] = None) -> InvoiceSettings:
    """Build settings from defaults, the YAML file and the environment.

    Args:
        config_path: YAML file to read; defaults to ``INVOICE_CONFIG_PATH`` or
            ``config/invoice_settings.yml`` under the project root.
    """
    settings = InvoiceSettings()
    config_path = config_path or os.getenv("INVOICE_CONFIG_PATH", DEFAULT_CONFIG_PATH)

    if os.path.exists(config_path):
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f) or {}
            section = (file_config.get('invoice') or {}) if isinstance(file_config, dict) else None
            if isinstance(section, dict):
                settings = replace(settings, **_coerce(settings, section))
                logger.info(f"Loaded invoice settings from {config_path}")
            else:
                logger.warning(f"Ignoring {config_path}: expected an 'invoice' mapping")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Error loading invoice settings: {e}")

    env_values = {field_name: os.environ[var] for var, field_name in ENV_OVERRIDES.items() if os.getenv(var)}
    if env_values:
        settings = replace(settings, **_coerce(settings, env_values))

    # Relative name sources are resolved against the project root
    source = settings.driver_names_source
    if source != "faker" and "://" not in source and not os.path.isabs(source):
        settings = replace(settings, driver_names_source=os.path.join(PROJECT_ROOT, source))

    return settings


__all__ = ["InvoiceSettings", "load_settings", "DEFAULT_DRIVER_NAMES_PATH"]
