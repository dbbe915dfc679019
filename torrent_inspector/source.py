import logging

import requests

logger = logging.getLogger(__name__)

# Seconds to wait for a remote torrent before giving up
REQUEST_TIMEOUT = 10


class SourceError(OSError):
    pass


def is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def read_url(url: str, timeout: int = REQUEST_TIMEOUT) -> bytes:
    """
    Downloads a torrent file

    Args:
        - url (str): Torrent file url
        - timeout (int, optional): Timeout value in seconds. Defaults to 10.

    Returns:
        - bytes: Response body
    """
    logger.debug("Downloading [%s]", url)
    try:
        r = requests.get(url, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as e:
        raise SourceError(f"Could not download {url}: {e}") from e
    logger.debug("Downloaded %d bytes from [%s]", len(r.content), url)
    return r.content


def read_file(path: str) -> bytes:
    try:
        with open(path, "rb") as fp:
            return fp.read()
    except OSError as e:
        raise SourceError(f"Could not read {path}: {e}") from e


def read_source(location: str, timeout: int = REQUEST_TIMEOUT) -> bytes:
    """Reads the whole torrent from a local path or an http(s) url"""
    if is_url(location):
        return read_url(location, timeout=timeout)
    return read_file(location)
