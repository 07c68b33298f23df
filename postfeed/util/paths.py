from pathlib import Path
import os

def resolve_dir(value: str, base: Path) -> Path:
    # allow ./content relative to the config file and ~ expansion
    p = Path(os.path.expanduser(value))
    if not p.is_absolute():
        p = (base / p).resolve()
    return p

def ensure_dir(p: Path):
    p.mkdir(parents=True, exist_ok=True)
