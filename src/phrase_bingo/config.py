from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import yaml

from .uniqueness import pool_hash

ENV_PREFIX = "PHRASE_BINGO_"

PATH_KEYS = ("pool_file", "state_file", "out_pack", "out_roster", "out_report", "log_file", "summary_csv")
INT_KEYS = {"quantity", "grid_size", "max_attempts_per_card", "deck_size", "batch_size", "seed.value"}
BOOL_KEYS = {"free_center"}


def _read_config_file(config_path: Path | None) -> Dict[str, Any]:
    if not config_path:
        return {}
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    suffix = config_path.suffix.lower()
    text = config_path.read_text(encoding="utf-8")
    if suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
        if not isinstance(data, dict):
            raise ValueError("Top-level YAML config must be a mapping")
        return data
    if suffix == ".json":
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("Top-level JSON config must be a mapping")
        return data
    raise ValueError(f"Unsupported config extension: {suffix}")


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _collect_env_vars(env: Mapping[str, str]) -> Dict[str, Any]:
    """Map ENV variables with PHRASE_BINGO_ prefix to config keys.

    We use an explicit map to avoid ambiguity. Keys not present are ignored.
    """
    mapping: Dict[str, str] = {
        # Generation
        f"{ENV_PREFIX}POOL_FILE": "pool_file",
        f"{ENV_PREFIX}QUANTITY": "quantity",
        f"{ENV_PREFIX}GRID_SIZE": "grid_size",
        f"{ENV_PREFIX}FREE_CENTER": "free_center",
        f"{ENV_PREFIX}FREE_LABEL": "free_label",
        f"{ENV_PREFIX}ID_PREFIX": "id_prefix",
        f"{ENV_PREFIX}TITLE": "title",
        f"{ENV_PREFIX}SPONSOR_NAME": "sponsor_name",
        f"{ENV_PREFIX}MAX_ATTEMPTS_PER_CARD": "max_attempts_per_card",
        # Seed
        f"{ENV_PREFIX}SEED_ENGINE": "seed.engine",
        f"{ENV_PREFIX}SEED_VALUE": "seed.value",
        # Caller
        f"{ENV_PREFIX}DECK_SIZE": "deck_size",
        f"{ENV_PREFIX}BATCH_SIZE": "batch_size",
        f"{ENV_PREFIX}STATE_FILE": "state_file",
        # Output & UX
        f"{ENV_PREFIX}COLORS": "colors",
        f"{ENV_PREFIX}LOG_LEVEL": "log_level",
        f"{ENV_PREFIX}LOG_FORMAT": "log_format",
        f"{ENV_PREFIX}LOG_FILE": "log_file",
        f"{ENV_PREFIX}OUT_PACK": "out_pack",
        f"{ENV_PREFIX}OUT_ROSTER": "out_roster",
        f"{ENV_PREFIX}OUT_REPORT": "out_report",
        f"{ENV_PREFIX}SUMMARY_CSV": "summary_csv",
    }

    result: Dict[str, Any] = {}
    for env_key, cfg_key in mapping.items():
        if env_key not in env:
            continue
        raw = env[env_key]
        if cfg_key in INT_KEYS:
            try:
                result[cfg_key] = int(raw)
            except ValueError:
                result[cfg_key] = raw
        elif cfg_key in BOOL_KEYS:
            result[cfg_key] = _parse_bool(raw)
        else:
            result[cfg_key] = raw

    return result


def _set_nested(config: Dict[str, Any], dotted_key: str, value: Any) -> None:
    parts = dotted_key.split(".")
    cursor = config
    for part in parts[:-1]:
        if part not in cursor or not isinstance(cursor[part], dict):
            cursor[part] = {}
        cursor = cursor[part]
    cursor[parts[-1]] = value


def _apply_overrides(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = json.loads(json.dumps(base))  # deep copy via JSON
    for key, value in overrides.items():
        if "." in key:
            _set_nested(merged, key, value)
        elif isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def canonical_json_dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=True, sort_keys=True, separators=(",", ":"))


def compute_params_hash(resolved: Mapping[str, Any], pool: Optional[Sequence[str]] = None) -> str:
    include = {
        "quantity",
        "grid_size",
        "free_center",
        "free_label",
        "id_prefix",
        "max_attempts_per_card",
        # seed
        "seed.engine",
        "seed.value",
    }

    def extract(path: str, source: Mapping[str, Any]) -> Any:
        cur: Any = source
        for part in path.split("."):
            if not isinstance(cur, Mapping) or part not in cur:
                return None
            cur = cur[part]
        return cur

    contract: Dict[str, Any] = {}
    for item in include:
        value = extract(item, resolved)
        if value is not None:
            contract[item] = value
    if pool is not None:
        contract["pool_hash"] = pool_hash(pool)

    digest = hashlib.sha256(canonical_json_dumps(contract).encode("utf-8")).hexdigest()
    return f"sha256:{digest}"


def resolve_paths(
    resolved: Dict[str, Any],
    config_file: Path | None,
    cli_overrides: Dict[str, Any],
) -> Dict[str, Any]:
    """Normalize paths per policy.

    - Paths from config file: resolve relative to config directory
    - Paths from CLI: resolve relative to CWD
    """
    cwd = Path.cwd()
    cfg_dir = config_file.parent if config_file else None

    def normalize(path_value: str | None, is_cli: bool) -> str | None:
        if path_value is None or path_value == "":
            return None
        p = Path(path_value)
        if p.is_absolute():
            return str(p)
        base = cwd if is_cli else (cfg_dir or cwd)
        return str((base / p).resolve())

    result = dict(resolved)
    cli_keys = {k for k in cli_overrides.keys() if k in PATH_KEYS}

    for key in PATH_KEYS:
        value = resolved.get(key)
        if value is None:
            continue
        result[key] = normalize(str(value), key in cli_keys)

    return result


def resolve_parameters(
    *,
    config_path_str: str | None,
    cli_overrides: Dict[str, Any],
    env: Mapping[str, str] | None = None,
) -> Tuple[Dict[str, Any], str, Path | None]:
    """Resolve parameters with precedence CLI > ENV > config > defaults.

    Returns (resolved_params, params_hash, config_path)
    """
    config_path = Path(config_path_str).resolve() if config_path_str else None
    file_cfg = _read_config_file(config_path) if config_path else {}
    env_map = _collect_env_vars(os.environ if env is None else env)

    defaults: Dict[str, Any] = {
        "quantity": 30,
        "grid_size": 5,
        "free_center": True,
        "free_label": "FREE",
        "id_prefix": "CARD",
        "title": "Bingo",
        "sponsor_name": "",
        "max_attempts_per_card": 200,
        "seed": {"engine": "system", "value": None},
        "batch_size": 10,
        "colors": "auto",
        "log_level": "INFO",
        "log_format": "text",
    }

    # Merge: config > defaults, then ENV, then CLI
    merged = _apply_overrides(defaults, file_cfg)
    merged = _apply_overrides(merged, env_map)
    merged = _apply_overrides(merged, cli_overrides)

    merged = resolve_paths(merged, config_path, cli_overrides)

    params_hash = compute_params_hash(merged)
    return merged, params_hash, config_path
