import asyncio
import logging
import time
from functools import wraps
from typing import Callable, Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_default_level = logging.INFO

def setup_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Returns a logger writing to stderr in the project format.
    Loggers created after set_level() pick up the configured level.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
        logger.setLevel(_default_level if level is None else level)
    return logger

def set_level(level_name: str, names: tuple = ("src",)):
    """
    Applies a textual level (e.g. "DEBUG") from the config to every project
    logger, existing or future. Unknown names fall back to INFO.
    """
    global _default_level
    level = logging.getLevelName(str(level_name).upper())
    if not isinstance(level, int):
        level = logging.INFO
    _default_level = level
    for name in list(logging.root.manager.loggerDict):
        if name.startswith(names):
            logging.getLogger(name).setLevel(level)

def log_execution_time(logger: logging.Logger, slow_seconds: float = 0.05):
    """
    Decorator timing sync or async callables. Calls slower than
    `slow_seconds` are reported as warnings, the rest at debug level.
    """
    def report(func: Callable, elapsed: float):
        if elapsed > slow_seconds:
            logger.warning(f"{func.__name__} took {elapsed:.3f}s")
        else:
            logger.debug(f"{func.__name__} executed in {elapsed:.3f}s")

    def decorator(func: Callable):
        if asyncio.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                start = time.perf_counter()
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    logger.error(f"{func.__name__} failed: {e}")
                    raise
                finally:
                    report(func, time.perf_counter() - start)
            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.error(f"{func.__name__} failed: {e}")
                raise
            finally:
                report(func, time.perf_counter() - start)
        return wrapper
    return decorator
