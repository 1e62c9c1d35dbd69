"""
Default Printer Configuration.

The CLI reads the printer target and profile from here whenever --target
or --profile is left out:

    $ posprint config set tcp://192.168.1.50:9100 --profile TM-T88V
    $ posprint text "Hello"

The file is plain JSON at ~/.config/posprinter/config.json.
"""

import json
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

CONFIG_DIR = Path.home() / ".config" / "posprinter"
CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULT_PROFILE = "default"


@dataclass
class SavedConfig:
    """
    Default printer.

    Attributes:
        target: Target string understood by connection.open_target()
        profile: Built-in profile name
        saved_at: Unix time of the last `config set`
    """
    target: str
    profile: str
    saved_at: float


def load_config() -> Optional[SavedConfig]:
    """
    Read the default printer.

    Returns:
        SavedConfig, or None when nothing is saved or the file is unreadable
    """
    if not CONFIG_FILE.exists():
        return None

    try:
        data = json.loads(CONFIG_FILE.read_text())
        return SavedConfig(
            target=data["target"],
            profile=data.get("profile", DEFAULT_PROFILE),
            saved_at=data["saved_at"],
        )
    except (json.JSONDecodeError, KeyError, TypeError, AttributeError):
        # Hand-edited or truncated file
        return None


def save_config(target: str, profile: str = DEFAULT_PROFILE) -> SavedConfig:
    """
    Store target and profile as the default printer.

    The values are written as given; the CLI validates them first.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    config = SavedConfig(target=target, profile=profile, saved_at=time.time())
    CONFIG_FILE.write_text(json.dumps(asdict(config), indent=2))
    return config


def clear_config() -> bool:
    """Forget the default printer. Returns False if none was saved."""
    if not CONFIG_FILE.exists():
        return False
    CONFIG_FILE.unlink()
    return True
