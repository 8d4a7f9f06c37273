import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from gong_core.models import Defaults, Integration, Rule

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.gong.yaml"

DEFAULT_CONFIG: dict = {
    "delay": 0,  # seconds; <= 0 pings immediately
    "enabled": True,
    "repository": None,  # owner/name; None = auto-detect
    "pr": None,
    "github_token": None,
    "slack_webhook": None,
    "integrations": [],  # [{type: stdout, params: {template: ...}}]
    "rules": [],
}

ENV_PREFIX = "GONG_"
_ENV_KEYS = ("delay", "enabled", "repository", "pr", "github_token", "slack_webhook")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class ConfigError(ValueError):
    """Raised when a configuration value cannot be interpreted."""


def _normalize_key(key) -> str:
    return str(key).strip().replace("-", "_")


def _to_bool(value, key: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}")


def _to_int(value, key: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer number of seconds, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be an integer number of seconds, got {value!r}")


def load_config(config_path: str = DEFAULT_CONFIG_PATH, cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. YAML config file (default ~/.gong.yaml)
      3. GONG_* environment variables
      4. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "integrations": [], "rules": []}

    path = Path(config_path).expanduser()
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ConfigError(f"Config file {path} must contain a mapping at the top level.")
        config.update({_normalize_key(k): v for k, v in file_config.items()})
        logger.debug("Using config file: %s", path)

    for key in _ENV_KEYS:
        value = os.environ.get(ENV_PREFIX + key.upper())
        if value is not None:
            config[key] = value

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["delay"] = _to_int(config["delay"], "delay")
    config["enabled"] = _to_bool(config["enabled"], "enabled")
    if config["pr"] is not None:
        config["pr"] = str(config["pr"])

    return config


def parse_integration(raw: dict) -> Integration:
    """Build an Integration from a {type, params} mapping. Non-string params are dropped."""
    integration_type = raw.get("type")
    params = raw.get("params") or {}
    if not isinstance(params, dict):
        params = {}
    return Integration(
        type=integration_type if isinstance(integration_type, str) else "",
        params={str(k): v for k, v in params.items() if isinstance(v, str)},
    )


def parse_integrations(raw) -> list[Integration]:
    """Parse a list of integration mappings, skipping entries without a type."""
    if not isinstance(raw, list):
        return []
    integrations = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        integration = parse_integration(item)
        if integration.type:
            integrations.append(integration)
    return integrations


def _rule_key(key) -> str:
    # matchName, match_name, match-name and matchname are the same key.
    return str(key).replace("_", "").replace("-", "").lower()


def parse_rules(raw) -> list[Rule]:
    """Parse the rules list. Rules without any match pattern are discarded."""
    if not isinstance(raw, list):
        return []

    rules = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        entry = {_rule_key(k): v for k, v in item.items()}

        def _pattern(key: str) -> str:
            value = entry.get(key)
            return value if isinstance(value, str) else ""

        rule = Rule(
            match_name=_pattern("matchname"),
            match_title=_pattern("matchtitle"),
            match_author=_pattern("matchauthor"),
            delay=_to_int(entry.get("delay", 0), "rules[].delay"),
            enabled=_to_bool(entry.get("enabled", True), "rules[].enabled"),
            integrations=tuple(parse_integrations(entry.get("integrations"))),
        )
        if rule.has_pattern():
            rules.append(rule)
        else:
            logger.debug("Skipping rule without match pattern: %r", item)

    logger.debug("Parsed rules: %s", rules)
    return rules


def global_integrations(config: dict) -> list[Integration]:
    """Return configured integrations, defaulting to a single stdout integration."""
    integrations = parse_integrations(config.get("integrations"))
    if not integrations:
        integrations = [Integration(type="stdout")]
    return integrations


def build_defaults(config: dict) -> Defaults:
    return Defaults(
        delay=config["delay"],
        enabled=config["enabled"],
        integrations=tuple(global_integrations(config)),
    )
