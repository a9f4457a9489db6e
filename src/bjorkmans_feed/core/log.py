from __future__ import annotations
import datetime, sys, traceback


def log(*args):
    ts = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    msg = " ".join(str(a) for a in args)
    print(f"[{ts}] {msg}", file=sys.stdout, flush=True)


def log_exception(tag: str, exc: BaseException) -> None:
    """Log `exc` under `tag` followed by its traceback."""
    log(tag, repr(exc))
    traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stdout)
    sys.stdout.flush()
