import logging
import sys


class CustomFormatter(logging.Formatter):
    grey = "\x1b[38;20m"
    cyan = "\x1b[36;20m"
    yellow = "\x1b[33;20m"
    red = "\x1b[31;20m"
    bold_red = "\x1b[31;1m"
    reset = "\x1b[0m"
    log_format = "\x1b[1m%(asctime)s [%(levelname)s]\x1b[0m - %(name)s - %(message)s"

    FORMATS = {
        logging.DEBUG: cyan + log_format + reset,
        logging.INFO: grey + log_format + reset,
        logging.WARNING: yellow + log_format + reset,
        logging.ERROR: red + log_format + reset,
        logging.CRITICAL: bold_red + log_format + reset,
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno, self.log_format)
        formatter = logging.Formatter(log_fmt)
        return formatter.format(record)


def setup_logger(level=logging.INFO):
    """
    Configure the root logger with the colored formatter.

    Log lines go to stderr so that stdout only carries scan matches.
    Calling it again only adjusts the level.
    """
    root = logging.getLogger()
    if any(isinstance(h.formatter, CustomFormatter) for h in root.handlers):
        root.setLevel(level)
        return

    ColorfulHandler = logging.StreamHandler(sys.stderr)
    ColorfulHandler.setFormatter(CustomFormatter())

    logging.addLevelName(logging.ERROR, "ERRR")
    logging.addLevelName(logging.WARNING, "WARN")

    logging.basicConfig(level=level, handlers=[ColorfulHandler])
