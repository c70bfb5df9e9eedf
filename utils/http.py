"""aiohttp client settings shared by every outbound title-info request."""

import asyncio

import aiohttp
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

import config

# Only transport-level hiccups are retried; an HTTP status is an answer.
TRANSIENT_ERRORS = (aiohttp.ClientConnectionError, asyncio.TimeoutError)

transient_retry = retry(
    stop=stop_after_attempt(config.TITLE_INFO_FETCH_ATTEMPTS),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
    retry=retry_if_exception_type(TRANSIENT_ERRORS),
    reraise=True,
)


def client_timeout() -> aiohttp.ClientTimeout:
    return aiohttp.ClientTimeout(
        total=config.TITLE_INFO_HTTP_TOTAL_TIMEOUT_SECONDS,
        connect=config.TITLE_INFO_HTTP_CONNECT_TIMEOUT_SECONDS,
        sock_read=config.TITLE_INFO_HTTP_SOCK_READ_TIMEOUT_SECONDS,
    )
