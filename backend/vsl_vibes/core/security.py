"""
Security utilities for identifiers, export file names and fetched URLs
Project and slide ids end up in file system paths, so they are validated
before any storage or export code touches the disk. Image URLs stored on
slides are fetched by the server during export, so only public https hosts
are allowed.
"""

import asyncio
import ipaddress
import re
import socket
from typing import Awaitable, Callable, List
from urllib.parse import urlparse

from .logging import get_logger

logger = get_logger(__name__, component="security")

_UUID_PATTERN = re.compile(
    r'^[a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12}$',
    re.IGNORECASE,
)


def validate_project_id(project_id: str) -> bool:
    """
    Validate project ID format

    Project IDs must be UUIDs; anything else could be used to escape the
    project data directory.

    Example:
        >>> validate_project_id("123e4567-e89b-12d3-a456-426614174000")
        True
        >>> validate_project_id("../../etc/passwd")
        False
    """
    is_valid = bool(_UUID_PATTERN.match(project_id or ""))
    if not is_valid:
        logger.warning("Invalid project ID format", extra={"project_id": project_id})
    return is_valid


def sanitize_filename(filename: str, default: str = "export") -> str:
    """
    Turn a user-facing project name into a safe download file name

    Path separators, control characters and characters reserved on common
    file systems are removed and whitespace runs become underscores.

    Example:
        >>> sanitize_filename("My VSL: Launch / v2")
        'My_VSL_Launch_v2'
    """
    name = "".join(ch for ch in (filename or "") if ch.isprintable())
    name = re.sub(r'[<>:"|?*/\\]', "", name)
    name = name.encode("ascii", "ignore").decode("ascii")
    name = re.sub(r"\s+", "_", name.strip()).strip("._")
    name = name[:120]
    if not name:
        return default
    return name


Resolver = Callable[[str], Awaitable[List[str]]]

_LOCAL_HOST_SUFFIXES = (".localhost", ".local", ".internal")


async def resolve_host(host: str) -> List[str]:
    """All addresses a host name resolves to."""
    infos = await asyncio.get_running_loop().getaddrinfo(host, None, type=socket.SOCK_STREAM)
    return [info[4][0] for info in infos]


def is_public_address(address: str) -> bool:
    try:
        return ipaddress.ip_address(address.split("%", 1)[0]).is_global
    except ValueError:
        return False


async def is_public_https_url(url: str, resolve: Resolver = resolve_host) -> bool:
    """
    True for https URLs whose host only resolves to public addresses

    Loopback, private, link-local and reserved addresses (cloud metadata
    endpoints included) are refused, as are names that fail to resolve.
    """
    parsed = urlparse(url or "")
    host = (parsed.hostname or "").lower().rstrip(".")
    if parsed.scheme != "https" or not host:
        return False
    if host == "localhost" or host.endswith(_LOCAL_HOST_SUFFIXES):
        return False

    try:
        ipaddress.ip_address(host)
        addresses = [host]
    except ValueError:
        try:
            addresses = await resolve(host)
        except OSError as e:
            logger.warning("Could not resolve image host", extra={"host": host, "error": str(e)})
            return False

    public = bool(addresses) and all(is_public_address(address) for address in addresses)
    if not public:
        logger.warning("Refusing non-public image host", extra={"host": host})
    return public
