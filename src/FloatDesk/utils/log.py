import logging
import sys

PACKAGE_LOGGER = "FloatDesk"


def setup_logging(debug: bool = False) -> logging.Logger:
    """
    Attaches a console handler to the package logger.

    Safe to call more than once; the handler is only installed the first time.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if not any(getattr(h, "_floatdesk_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        handler._floatdesk_handler = True
        logger.addHandler(handler)

    return logger


def set_debug(enabled: bool):
    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if enabled else logging.INFO)
