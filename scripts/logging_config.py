import logging
import sys


def setup_logging(verbose=False):
    """Route log records to stderr; stdout is reserved for JSON results."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    h = logging.StreamHandler(sys.stderr)
    h.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
    root.handlers.clear()
    root.addHandler(h)
