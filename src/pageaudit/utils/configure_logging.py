import logging
import sys
from tqdm import tqdm


class LogWithTqdm(logging.Handler):
    """
    A logging handler that redirects output to `tqdm.write()`,
    so log messages do not interfere with the progress bar display.
    """
    def emit(self, record):
        try:
            msg = self.format(record)
            tqdm.write(msg, file=sys.stderr)
            self.flush()
        except Exception:
            self.handleError(record)


def _to_level(level, default):
    if isinstance(level, str):
        return getattr(logging, level.upper(), default)
    return level if level is not None else default


def configure_logger(general_level='INFO', module_specific_levels=None, silenced_loggers=None):
    """
    Configures the root logger and specific module loggers with a
    TQDM-friendly handler.
    """
    handler = LogWithTqdm()
    handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s"
    ))

    root_logger = logging.getLogger()
    root_logger.setLevel(_to_level(general_level, logging.INFO))
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name, level in (module_specific_levels or {}).items():
        logging.getLogger(name).setLevel(_to_level(level, logging.INFO))

    # Muzzle noisy loggers by setting their level high.
    for name, level in (silenced_loggers or {}).items():
        logging.getLogger(name).setLevel(_to_level(level, logging.CRITICAL))
