import sys
import time


# ============================================================
# Logging helpers
# ============================================================

def log(msg: str) -> None:
    print(f"[bitfield] {msg}", flush=True)


def die(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    raise SystemExit(1)


def format_eta(start_time: float, progress: int, total: int) -> str:
    if progress <= 0 or total <= 0:
        return "--:--"
    elapsed = time.time() - start_time
    if elapsed <= 0:
        return "--:--"
    rate = progress / elapsed
    if rate <= 0:
        return "--:--"
    remaining = (total - progress) / rate
    return time.strftime("%M:%S", time.gmtime(max(0.0, remaining)))
