import logging
from typing import Optional


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once; later calls only adjust the level."""
    if level is None:
        from .config import get_settings
        level = get_settings().log_level

    resolved = getattr(logging, str(level).upper(), logging.INFO)

    root = logging.getLogger()
    if root.handlers:
        root.setLevel(resolved)
        for h in root.handlers:
            h.setLevel(resolved)
        return

    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
