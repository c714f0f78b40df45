"""
Logging helpers for consistent log formatting.
"""
import logging


def sanitize_url_for_logging(url: str) -> str:
    """Remove credentials from URL for safe logging."""
    if "://" not in url:
        return url
    try:
        protocol, rest = url.split("://", 1)
        if "@" in rest:
            rest = rest.split("@", 1)[1]
            return f"{protocol}://***:***@{rest}"
        return url
    except (ValueError, IndexError):
        return url


def log_source_download(logger: logging.Logger, source_name: str, url: str) -> None:
    """
    Log the start of an upstream download.

    Args:
        logger: Logger instance
        source_name: Label of the source (playlist, guide)
        url: Source URL being downloaded
    """
    logger.info(f"Downloading {source_name} from {sanitize_url_for_logging(url)}")


def log_parse_summary(logger: logging.Logger, source_name: str, count: int, unit: str) -> None:
    """
    Log the outcome of parsing a source.

    Args:
        logger: Logger instance
        source_name: Label of the source (playlist, guide)
        count: Number of parsed items
        unit: What was counted (channels, programmes, ...)
    """
    logger.info(f"{source_name.capitalize()} parsed: {count} {unit}")
