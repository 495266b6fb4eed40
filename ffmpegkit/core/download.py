"""
Network helpers: text/JSON fetches and archive downloads with checksum verification.

This module provides:
- fetch_text / fetch_json for release listings (errors propagate so the
  caller's retry policy can see them)
- download_file, which streams an archive from the first working mirror
- Checksum verification against .md5 / .sha256 side files
"""

import hashlib
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence
from urllib.parse import urlparse

import requests
from requests.exceptions import RequestException

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
CHUNK_SIZE = 8192


class DownloadError(Exception):
    """Exception raised when download fails."""

    pass


class ChecksumError(DownloadError):
    """Exception raised when checksum verification fails."""

    pass


class StreamingHasher:
    """Compute hash incrementally for streaming downloads."""

    def __init__(self, algorithm: str = "sha256"):
        """
        Initialize streaming hasher.

        Args:
            algorithm: Hash algorithm ('sha256', 'sha512', 'md5')

        Raises:
            ValueError: If algorithm is not supported
        """
        self.algorithm = algorithm.lower()

        if self.algorithm == "sha256":
            self.hasher = hashlib.sha256()
        elif self.algorithm == "sha512":
            self.hasher = hashlib.sha512()
        elif self.algorithm == "md5":
            self.hasher = hashlib.md5()
        else:
            raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    def update(self, data: bytes):
        """Add data to hash computation."""
        self.hasher.update(data)

    def finalize(self) -> str:
        """Get final hash value as hex string."""
        return self.hasher.hexdigest()

    def verify(self, expected_hash: str) -> bool:
        """Check if computed hash matches expected value (case-insensitive)."""
        return self.finalize().lower() == expected_hash.lower()


def checksum_algorithm(checksum_url: str) -> str:
    """
    Infer the hash algorithm from a checksum file URL.

    Example:
        >>> checksum_algorithm("https://example.com/ffmpeg.tar.xz.md5")
        'md5'
    """
    lowered = checksum_url.lower()
    for algorithm in ("md5", "sha512", "sha256"):
        if lowered.endswith(f".{algorithm}"):
            return algorithm
    return "sha256"


def fetch_text(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> str:
    """
    GET a URL and return the response body as text.

    Raises:
        requests.RequestException: On connection errors or HTTP error status
    """
    logger.debug(f"GET {url}")
    response = requests.get(url, headers=headers, timeout=timeout)
    response.raise_for_status()
    return response.text


def fetch_json(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, Any]] = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> Any:
    """
    GET a URL and decode the JSON body.

    Raises:
        requests.RequestException: On connection errors or HTTP error status
        ValueError: If the body is not valid JSON
    """
    logger.debug(f"GET {url}")
    response = requests.get(url, headers=headers, params=params, timeout=timeout)
    response.raise_for_status()
    return response.json()


def fetch_checksum(checksum_url: str, timeout: int = DEFAULT_TIMEOUT) -> str:
    """
    Fetch a checksum side file and return the digest it contains.

    Both bare digests and ``<digest>  <filename>`` lines are accepted.

    Raises:
        ChecksumError: If the file is empty
    """
    content = fetch_text(checksum_url, timeout=timeout).strip()
    if not content:
        raise ChecksumError(f"Empty checksum file: {checksum_url}")
    return content.split()[0]


def archive_file_name(url: str) -> str:
    """
    File name for a downloaded archive, taken from the URL path.

    Example:
        >>> archive_file_name("https://example.com/builds/ffmpeg-git-full.7z")
        'ffmpeg-git-full.7z'
    """
    return Path(urlparse(url).path).name or "download"


def download_file(
    urls: Sequence[str],
    download_dir: Path,
    checksum_urls: Sequence[str] = (),
    headers_for: Optional[Callable[[str], Optional[Dict[str, str]]]] = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> Path:
    """
    Download an archive from the first mirror that works.

    Mirrors are tried in order. Checksum URLs are paired with mirrors by
    position; a mirror with a paired checksum is verified while streaming,
    a mirror without one is not. Each mirror's file keeps its own name so
    mirrors may serve different archive formats.

    Args:
        urls: Mirror URLs, tried in order
        download_dir: Directory to save the file into
        checksum_urls: Checksum side-file URLs; empty to skip verification
        headers_for: Optional callable returning request headers for a URL
        timeout: Request timeout in seconds

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: If every mirror fails
        ChecksumError: If the last mirror tried delivered a mismatching file
        ValueError: If no URL is given

    Example:
        >>> archive = download_file(
        ...     ["https://example.com/ffmpeg.tar.xz"],
        ...     Path("/tmp/downloads"),
        ...     checksum_urls=["https://example.com/ffmpeg.tar.xz.md5"],
        ... )
    """
    if not urls:
        raise ValueError("At least one download URL is required")

    download_dir = Path(download_dir)
    download_dir.mkdir(parents=True, exist_ok=True)

    last_error: Optional[Exception] = None
    for index, url in enumerate(urls):
        checksum_url = checksum_urls[index] if index < len(checksum_urls) else None
        headers = headers_for(url) if headers_for else None
        destination = download_dir / archive_file_name(url)

        try:
            return _download_one(url, destination, checksum_url, headers, timeout)
        except (RequestException, ChecksumError) as e:
            logger.warning(f"Download from {url} failed: {e}")
            last_error = e
            destination.unlink(missing_ok=True)

    if isinstance(last_error, ChecksumError):
        raise last_error
    raise DownloadError(
        f"Download failed from all {len(urls)} mirror(s): {last_error}"
    ) from last_error


def _download_one(
    url: str,
    destination: Path,
    checksum_url: Optional[str],
    headers: Optional[Dict[str, str]],
    timeout: int,
) -> Path:
    """Stream one URL to disk, verifying the checksum if requested."""
    expected = None
    hasher = None
    if checksum_url:
        expected = fetch_checksum(checksum_url, timeout=timeout)
        hasher = StreamingHasher(checksum_algorithm(checksum_url))

    logger.info(f"Downloading from {url}")

    with requests.get(
        url, headers=headers, stream=True, timeout=timeout, allow_redirects=True
    ) as response:
        response.raise_for_status()
        with open(destination, "wb") as f:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    f.write(chunk)
                    if hasher:
                        hasher.update(chunk)

    if hasher and expected:
        if not hasher.verify(expected):
            raise ChecksumError(
                f"Checksum mismatch for {destination.name}: "
                f"expected {expected}, got {hasher.finalize()}"
            )
        logger.info("Checksum verified successfully")

    logger.info(f"Download complete: {destination}")
    return destination


__all__ = [
    "DownloadError",
    "ChecksumError",
    "StreamingHasher",
    "checksum_algorithm",
    "fetch_text",
    "fetch_json",
    "fetch_checksum",
    "archive_file_name",
    "download_file",
]
