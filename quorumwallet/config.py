"""
Configuration module for QuorumWallet.

Centralizes all configuration with environment variable support and
validation. The wallet bootstrap for the service and CLI is read either from
a JSON file (QUORUMWALLET_CONFIG_PATH) or from the owner/threshold variables.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import InvalidConfiguration

# ============================================================
# Environment Configuration
# ============================================================

ENV = os.getenv("QUORUMWALLET_ENV", "dev")  # dev|stage|prod

# Logging
LOG_LEVEL = os.getenv("QUORUMWALLET_LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("QUORUMWALLET_LOG_JSON", "1").lower() in ("1", "true", "yes")
LOG_FILE = os.getenv("QUORUMWALLET_LOG_FILE", "")

# Registry limits
MAX_OWNERS = int(os.getenv("QUORUMWALLET_MAX_OWNERS", "50"))

# Wallet bootstrap
CONFIG_PATH = os.getenv("QUORUMWALLET_CONFIG_PATH", "")
OWNERS = os.getenv("QUORUMWALLET_OWNERS", "")
REQUIRED = os.getenv("QUORUMWALLET_REQUIRED", "")
INITIAL_BALANCE = int(os.getenv("QUORUMWALLET_INITIAL_BALANCE", "0"))

# Service
HOST = os.getenv("QUORUMWALLET_HOST", "127.0.0.1")
PORT = int(os.getenv("QUORUMWALLET_PORT", "8780"))


# ============================================================
# Wallet Bootstrap
# ============================================================

def load_json(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def parse_owners(raw: str) -> List[str]:
    """Split a comma separated owner list, dropping blanks."""
    return [o.strip() for o in raw.split(",") if o.strip()]


def wallet_settings(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Resolve owners, threshold and opening balance.

    A JSON config file wins over the environment. Missing values are passed
    through as empty so that the registry reports them as InvalidConfiguration.
    """
    path = path or CONFIG_PATH
    if path:
        data = load_json(path)
        owners = list(data.get("owners", []))
        # Owners must be strings to match X-Caller identities.
        if not all(isinstance(o, str) for o in owners):
            raise InvalidConfiguration(f"owner identities in {path} must be strings")
        return {
            "owners": owners,
            "required": data.get("required", 0),
            "initial_balance": int(data.get("initial_balance", 0)),
        }

    return {
        "owners": parse_owners(OWNERS),
        "required": int(REQUIRED) if REQUIRED.strip() else 0,
        "initial_balance": INITIAL_BALANCE,
    }


# ============================================================
# Validation
# ============================================================

def validate_config() -> Dict[str, bool]:
    """
    Validate that the bootstrap source is usable.
    Returns dict of check -> ok.
    """
    checks = {
        "env": ENV in ("dev", "stage", "prod"),
        "max_owners": MAX_OWNERS > 0,
    }
    if CONFIG_PATH:
        checks["config_path"] = Path(CONFIG_PATH).exists()
    else:
        checks["owners"] = bool(parse_owners(OWNERS))
        checks["required"] = REQUIRED.strip().isdigit()
    return checks
