"""
This module encapsulates the reading and processing of the config file
/etc/licensekeeper.yaml and provides callers with a mechanism to access the
various properties specified therein.
"""

import os
import sys

import yaml

# Check for system config first, then fall back to development config
if os.name == "nt":  # Windows
    CONFIG_PATH = r"C:\ProgramData\LicenseKeeper\licensekeeper.yaml"
else:  # Unix-like (Linux, macOS, BSD)
    CONFIG_PATH = "/etc/licensekeeper.yaml"

if not os.path.exists(CONFIG_PATH):
    if os.path.exists("licensekeeper-dev.yaml"):
        CONFIG_PATH = "licensekeeper-dev.yaml"
    elif os.path.exists("licensekeeper-dev.yaml.example"):
        CONFIG_PATH = "licensekeeper-dev.yaml.example"

# Environment override for the license key, takes precedence over the stored key
LICENSE_KEY_ENV = "LICENSEKEEPER_LICENSE_KEY"

DEFAULT_UPDATER_URL = "https://updates.licensekeeper.io/"


def _apply_defaults(the_config: dict) -> dict:
    """Fill in any missing sections and values with their defaults."""
    if not "api" in the_config.keys():
        the_config["api"] = {}
    if not "host" in the_config["api"].keys():
        the_config["api"]["host"] = "localhost"
    if not "port" in the_config["api"].keys():
        the_config["api"]["port"] = 8443

    # Database settings
    if not "database" in the_config.keys():
        the_config["database"] = {}
    if not "url" in the_config["database"].keys():
        the_config["database"]["url"] = "sqlite:///licensekeeper.db"

    # Logging settings
    if not "logging" in the_config.keys():
        the_config["logging"] = {}
    if not "level" in the_config["logging"].keys():
        the_config["logging"]["level"] = "INFO|WARNING|ERROR|CRITICAL"
    if not "format" in the_config["logging"].keys():
        the_config["logging"][
            "format"
        ] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Translation settings
    if not "i18n" in the_config.keys():
        the_config["i18n"] = {}
    if not "language" in the_config["i18n"].keys():
        the_config["i18n"]["language"] = "en"

    # License settings
    if not "license" in the_config.keys():
        the_config["license"] = {}
    if not "updater_url" in the_config["license"].keys():
        the_config["license"]["updater_url"] = DEFAULT_UPDATER_URL
    if not "site_url" in the_config["license"].keys():
        the_config["license"]["site_url"] = "http://localhost:8080"
    if not "check_interval_hours" in the_config["license"].keys():
        the_config["license"]["check_interval_hours"] = 24
    if not "request_timeout" in the_config["license"].keys():
        the_config["license"]["request_timeout"] = 30
    if not "settings_url" in the_config["license"].keys():
        the_config["license"]["settings_url"] = "/admin/settings"
    if not "renew_url" in the_config["license"].keys():
        the_config["license"][
            "renew_url"
        ] = "https://licensekeeper.io/account/licenses/"
    if not "learn_more_url" in the_config["license"].keys():
        the_config["license"][
            "learn_more_url"
        ] = "https://licensekeeper.io/docs/how-to-renew-your-license/"
    if not "icon_url" in the_config["license"].keys():
        the_config["license"][
            "icon_url"
        ] = "/static/images/exclamation-triangle.svg"
    return the_config


config = {}
try:
    if os.path.exists(CONFIG_PATH):
        with open(CONFIG_PATH, "r", encoding="utf-8") as file:
            config = yaml.safe_load(file) or {}
    config = _apply_defaults(config)
except yaml.YAMLError as exc:
    if hasattr(exc, "problem_mark"):
        mark = exc.problem_mark
        print(
            f"Error in configuration file {CONFIG_PATH} at line {mark.line + 1}",
            file=sys.stderr,
        )
    sys.exit(1)


def get_config():
    """
    This function allows a caller to retrieve the config object.
    """
    return config


def get_license_config():
    """
    Get the license section of the configuration.
    """
    return config["license"]


def get_license_key_override():
    """
    Get the license key provided outside the option store.

    The environment variable wins over the config file.  Returns None when
    neither defines a key.
    """
    env_key = os.environ.get(LICENSE_KEY_ENV)
    if env_key is not None:
        return env_key
    return config["license"].get("key")


def get_updater_url():
    """
    Get the base URL of the remote licensing API.
    """
    return config["license"]["updater_url"]


def get_site_url():
    """
    Get the URL this site reports to the licensing API.
    """
    return config["license"]["site_url"]


def get_check_interval_hours():
    """
    Get the interval between periodic license checks, in hours.
    """
    return config["license"]["check_interval_hours"]


def get_request_timeout():
    """
    Get the licensing API request timeout in seconds.
    """
    return config["license"]["request_timeout"]


def get_database_url():
    """
    Get the SQLAlchemy database URL.
    """
    return config["database"]["url"]


def get_log_levels():
    """
    Get the pipe-separated logging levels configuration.
    """
    return config["logging"]["level"]


def get_log_format():
    """
    Get the logging format string.
    """
    return config["logging"]["format"]


def get_log_file():
    """
    Get the log file path if specified.
    """
    return config["logging"].get("file")


def get_language():
    """
    Get the language used for user-facing messages, e.g. "es".
    """
    return config["i18n"]["language"]
