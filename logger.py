import logging
import json
import os


def get_logger(name: str = "docfill") -> logging.Logger:
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            json.dumps({
                "time": "%(asctime)s",
                "level": "%(levelname)s",
                "message": "%(message)s",
                "module": "%(module)s",
                "funcName": "%(funcName)s",
                "lineno": "%(lineno)d"
            }),
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    return logger


logger = get_logger()
