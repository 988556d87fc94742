import os
from pathlib import Path

from dotenv import load_dotenv


def find_dotenv_candidates():
    """Possible .env locations: the service directory first, then CWD and its parents."""
    cwd = Path(os.getcwd()).resolve()
    candidates = [p / ".env" for p in [cwd] + list(cwd.parents)]
    service_dir = Path(__file__).resolve().parent.parent
    candidates.insert(0, service_dir / ".env")
    return candidates


def load_dotenv_once():
    """
    Load the first .env file found, once per process.
    Values already present in the environment are never overridden.
    Safe to call multiple times; only the first call loads.

    Returns:
        Path of the loaded file, or None when nothing was loaded
    """
    if getattr(load_dotenv_once, "_loaded", False):
        return getattr(load_dotenv_once, "_path", None)

    loaded = None
    for c in find_dotenv_candidates():
        if c.is_file():
            load_dotenv(dotenv_path=str(c), override=False)
            loaded = c
            break

    load_dotenv_once._loaded = True
    load_dotenv_once._path = loaded
    return loaded
