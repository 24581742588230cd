import os
import threading
import multiprocessing
import config

_stage = None

LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40}


def set_stage(stage):
    global _stage
    _stage = stage


def enabled(level):
    threshold = LEVELS.get(str(getattr(config, "LOG_LEVEL", "INFO")).upper(), 20)
    return LEVELS.get(level, 20) >= threshold


def log(scope, msg, level="INFO"):
    if not enabled(level):
        return
    pid = os.getpid()
    proc = multiprocessing.current_process().name
    thread = threading.current_thread().name
    stage_tag = f" {_stage}" if _stage is not None else ""
    text = f"[{level}{stage_tag} pid{pid} proc{proc} thr{thread} {scope}] {msg}"
    path = getattr(config, "LOG_FILE_PATH", None)
    if path:
        with open(path, "a", encoding="utf-8") as f:
            f.write(text + "\n")
    use_color = getattr(config, "LOG_COLOR", True) and os.getenv("NO_COLOR") is None
    if use_color:
        if level in ("WARN", "ERROR"):
            text = f"\x1b[31m{text}\x1b[0m"
        elif level == "DEBUG":
            # Generation detail.
            text = f"\x1b[33m{text}\x1b[0m"
        elif thread != "MainThread":
            text = f"\x1b[32m{text}\x1b[0m"
    print(text)
