import functools
import logging
from typing import Awaitable, Callable, TypeVar

T = TypeVar('T')

LOGGER = logging.getLogger(__name__)


def log_request(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Log provider requests for debugging

    Wraps a provider coroutine method. Responses that carry an ``error``
    field are logged as failures even though nothing was raised.
    """
    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> T:
        provider = args[0].__class__.__name__ if args else "Unknown"
        LOGGER.debug("[%s] Calling %s", provider, func.__name__)

        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            LOGGER.debug("[%s] %s raised: %s", provider, func.__name__, e)
            raise

        error = getattr(result, "error", None)
        if error:
            LOGGER.debug("[%s] %s failed: %s", provider, func.__name__, error)
        else:
            LOGGER.debug("[%s] %s succeeded", provider, func.__name__)
        return result

    return wrapper
