from urllib.parse import urlparse
from typing import Tuple

# Scan targets that resolve to bundled fixture pages instead of the network
RESERVED_TEST_TOKENS = ("test", "test-sample", "test-accessible")

MAX_URL_LENGTH = 2048


def is_reserved_token(url: str) -> bool:
    return url.strip() in RESERVED_TEST_TOKENS


def normalize_url(url: str) -> Tuple[str, bool]:

    url = url.strip()

    parsed = urlparse(url)

    # "example.com:8080" parses with scheme "example.com"
    if not parsed.scheme or "://" not in url:
        normalized = f"https://{url}"
        return normalized, True

    return url, False


def validate_url(url: str) -> Tuple[bool, str, str]:
    """
    Returns (is_valid, normalized_url, error_message).

    Reserved test tokens are valid as-is and are not normalized.
    """
    if not url or not url.strip():
        return False, "", "URL cannot be empty"

    if len(url) > MAX_URL_LENGTH:
        return False, url, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    if is_reserved_token(url):
        return True, url.strip(), ""

    normalized_url, was_modified = normalize_url(url)

    try:
        parsed = urlparse(normalized_url)

        if parsed.scheme not in ["http", "https"]:
            return False, normalized_url, f"Invalid URL scheme: {parsed.scheme} (must be http or https)"

        if not parsed.netloc:
            return False, normalized_url, "Invalid URL format: missing domain"

        # "http:/example.com" gains a scheme and parses with netloc "http:"
        if not parsed.hostname or parsed.netloc.endswith(":"):
            return False, normalized_url, "Invalid URL format: malformed domain"

        return True, normalized_url, ""

    except ValueError as e:
        return False, normalized_url, f"URL parsing error: {str(e)}"
