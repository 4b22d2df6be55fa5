import logging
import sys
from typing import TextIO

_HANDLER_NAME = "treestore"


def setup_logging(level: int | str = logging.INFO, stream: TextIO | None = None) -> None:
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # stderr by default: the CLI prints its results on stdout.
    target = stream or sys.stderr
    for existing in root_logger.handlers:
        if existing.get_name() == _HANDLER_NAME and getattr(existing, "stream", None) is target:
            return

    handler = logging.StreamHandler(target)
    handler.set_name(_HANDLER_NAME)

    formatter = logging.Formatter(
        "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
