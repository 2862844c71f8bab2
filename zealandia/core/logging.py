import logging

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"

# per-delta DEBUG lines from the ledger drown everything else at DEBUG level
NOISY_LOGGERS = ("zealandia.core.reputation.ledger",)


def setup_logging(level: str = "INFO", verbose_ledger: bool = False):
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    if not verbose_ledger:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(numeric, logging.INFO))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
