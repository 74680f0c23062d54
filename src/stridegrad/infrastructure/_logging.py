import logging

from ._config import log_level

ROOT_LOGGER_NAME = "stridegrad"


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Return a logger under the ``stridegrad`` hierarchy.

    The package root logger receives a single stream handler the first time
    this is called; its level comes from ``STRIDEGRAD_LOG_LEVEL``.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "[%(asctime)s][%(levelname)s][%(name)s] %(message)s"
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)
        root.setLevel(log_level())
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return root.getChild(name)
