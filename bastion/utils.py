import logging
import sys
import time
from functools import wraps

log = logging.getLogger(__name__)


# stdout is the command channel, everything else goes to stderr
def configure_logging(level=logging.DEBUG):
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("[%(name)s] %(message)s"))
    root = logging.getLogger("bastion")
    root.handlers[:] = [handler]
    root.setLevel(level)
    root.propagate = False


def timeit(func):
    @wraps(func)
    def wrapper(*arg, **kw):
        t1 = time.time()
        res = func(*arg, **kw)
        t2 = time.time()
        log.debug(f"timing {func.__name__} {t2 - t1:.4f}")
        return res

    return wrapper
