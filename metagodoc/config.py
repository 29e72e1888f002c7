"""Configuration loading."""

import copy
import os
from pathlib import Path

import yaml
from rich.console import Console

console = Console()

DEFAULT_CONFIG_PATH = Path("config/config.yaml")

# Repositories that are not worth indexing: slide decks, books, trees full of
# invalid Go files, or too large to walk every pass.
DEFAULT_SKIP_LIST = [
    "github.com/GoesToEleven/GolangTraining",
    "github.com/golang/go",
    "github.com/qiniu/gobook",
    "github.com/adonovan/gopl.io",
    "github.com/aws/aws-sdk-go",
]

DEFAULTS = {
    "cache_root": "/var/cache/metagodoc",
    "github": {
        "token": "",
        "language": "go",
        "sleep_minutes": 15,
        "skip_list": DEFAULT_SKIP_LIST,
    },
    "elasticsearch": {
        "url": "http://localhost:9200",
        "index": "metagodoc-repository",
        "trace": False,
    },
    "scheduler": {
        "queue_size": 100,
        "index_workers": 4,
    },
    "logging": {
        "level": "INFO",
    },
}


def _merge(base: dict, override: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_env(config: dict, environ: dict | None = None) -> dict:
    """Let METAGODOC_* environment variables override the file."""
    env = os.environ if environ is None else environ

    if env.get("METAGODOC_GITHUB_TOKEN"):
        config["github"]["token"] = env["METAGODOC_GITHUB_TOKEN"]
    if env.get("METAGODOC_ROOT"):
        config["cache_root"] = env["METAGODOC_ROOT"]
    if env.get("METAGODOC_ELASTIC_URL"):
        config["elasticsearch"]["url"] = env["METAGODOC_ELASTIC_URL"]
    if env.get("METAGODOC_TRACE_ELASTIC"):
        config["elasticsearch"]["trace"] = True
    return config


def load_config(config_path: Path | None = None, environ: dict | None = None) -> dict:
    """Load configuration from YAML, falling back to defaults.

    An explicitly given path that does not exist is fatal. The default path
    is optional so that environment variables alone are enough.
    """
    data: dict = {}
    if config_path is not None:
        if not config_path.exists():
            console.print(f"[red]Error:[/red] Config file not found: {config_path}")
            raise SystemExit(1)
        data = yaml.safe_load(config_path.read_text()) or {}
    elif DEFAULT_CONFIG_PATH.exists():
        data = yaml.safe_load(DEFAULT_CONFIG_PATH.read_text()) or {}

    return apply_env(_merge(DEFAULTS, data), environ)
