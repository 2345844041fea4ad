"""
Configuration loading from config.yaml at the repository root.
"""
from pathlib import Path
import yaml

CONFIG_PATH = Path(__file__).parents[2] / 'config.yaml'


def load_config(path=None):
    path = Path(path) if path else CONFIG_PATH
    if path.exists():
        return yaml.safe_load(path.read_text()) or {}
    return {}


def section(cfg, name):
    return (cfg or {}).get(name) or {}
