# productapi/log.py
import logging

from rich.logging import RichHandler

_configured = False


def configure_logging(level: str = "INFO"):
    """Install a rich console handler on the root logger (once per process)."""
    global _configured
    root = logging.getLogger()
    root.setLevel(level.upper())
    if _configured:
        return
    handler = RichHandler(rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s - %(message)s"))
    root.addHandler(handler)
    _configured = True
