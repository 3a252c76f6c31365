from __future__ import annotations

import os
import sys
import time


def eprint(*args, **kwargs) -> None:
    print(*args, file=sys.stderr, **kwargs)


def get_home_dir() -> str:
    home = os.getenv("SANVIPLEX_HOME")
    if not home:
        home = os.path.expanduser("~/.sanviplex")
    return home


def now_millis() -> int:
    return int(time.time() * 1000)


def env_flag(name: str, default: str = "") -> bool:
    return (os.getenv(name) or default).strip().lower() in ("1", "true", "yes", "on")
