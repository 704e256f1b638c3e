import yaml
from pathlib import Path
from .models import AppConfig

def load_config(config_path: Path) -> AppConfig:
    """Loads YAML config and parses it into AppConfig Pydantic model."""
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    # Flat layout (exclude/quality/".mp4" at root) is the plugin-style surface
    option_keys = {"exclude", "quality", "preset", "mute", "concurrency", "overrides"}
    flat = {k: data.pop(k) for k in list(data) if k in option_keys or str(k).startswith(".")}
    if flat:
        data["options"] = {**(data.get("options") or {}), **flat}

    return AppConfig(**data)
