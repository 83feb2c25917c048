# merchant_dashboard/utils/config_loader.py
import yaml
import os
import logging
import streamlit as st


logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

DEFAULT_TIMEOUT = 30
DEFAULT_MAX_WORKERS = 8


def read_settings(path="settings.yaml", environ=None):
    """Reads settings.yaml and applies environment overrides for the backend section."""
    environ = os.environ if environ is None else environ
    try:
        with open(path, 'r') as f:
            config = yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {"error": f"{path} not found."}
    except yaml.YAMLError as e:
        logging.error(f"Failed to parse {path}: {e}")
        return {"error": f"{path} is not valid YAML."}

    backend = config.setdefault('backend', {}) or {}
    config['backend'] = backend

    backend_url_env = environ.get('BACKEND_URL')
    if backend_url_env:
        backend['base_url'] = backend_url_env
        logging.info("Loaded backend URL from environment variable.")

    timeout_env = environ.get('BACKEND_TIMEOUT')
    if timeout_env:
        try:
            backend['timeout'] = float(timeout_env)
        except ValueError:
            logging.error(f"Ignoring non-numeric BACKEND_TIMEOUT value: {timeout_env!r}")

    if not backend.get('base_url'):
        return {"error": "Backend base_url missing in settings.yaml (or BACKEND_URL)."}

    backend['base_url'] = str(backend['base_url']).rstrip('/')
    backend.setdefault('timeout', DEFAULT_TIMEOUT)
    backend.setdefault('max_workers', DEFAULT_MAX_WORKERS)
    config.setdefault('dashboard', {})
    return config


@st.cache_data(show_spinner=False)
def load_app_config():
    """Loads config from YAML, with BACKEND_* environment variables taking precedence."""
    config = read_settings()
    if "error" in config:
        logging.error(f"Configuration error: {config['error']}")
    return config

APP_CONFIG = load_app_config()
