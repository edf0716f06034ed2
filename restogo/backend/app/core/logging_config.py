from __future__ import annotations

import logging
import os


def configurer_logging() -> None:
    """Configuration de logging minimaliste.

    - format clé=valeur, sortie stdout (compatible Docker)
    - niveau configurable via LOG_LEVEL
    - idempotent : un second appel ne fait qu’ajuster le niveau
    """

    level_str = os.getenv("LOG_LEVEL", "INFO").upper().strip()
    level = getattr(logging, level_str, logging.INFO)

    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return

    logging.basicConfig(
        level=level,
        format="%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)s",
    )
