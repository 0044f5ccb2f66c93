# dna_screener/utils/validators.py

"""
Data validation and field helpers.

Small, deterministic helpers shared by the tool adapters, the audit
normalizer and the CLI.
"""

import re
from typing import Any, Optional

from dna_screener.utils.logger import get_logger

logger = get_logger("Validators")

_ORCID_PATTERN = re.compile(r"^\d{4}-\d{4}-\d{4}-\d{3}[\dX]$")
_ORCID_URL_PREFIXES = ("https://orcid.org/", "http://orcid.org/", "orcid.org/")


def validate_customer_info(text: Optional[str]) -> str:
    """
    Checks that the submitted customer information is usable.

    Returns:
        The stripped text.

    Raises:
        ValueError: If the text is missing or blank.
    """
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValueError("Customer information must not be empty.")
    return cleaned


def normalize_orcid_id(value: str) -> str:
    """
    Strips an orcid.org URL prefix and surrounding whitespace from an ORCID iD.
    """
    cleaned = (value or "").strip()
    for prefix in _ORCID_URL_PREFIXES:
        if cleaned.lower().startswith(prefix):
            cleaned = cleaned[len(prefix):]
            break
    return cleaned.upper()


def is_valid_orcid_id(value: str) -> bool:
    """True for the XXXX-XXXX-XXXX-XXXX iD format (last char may be X)."""
    return bool(_ORCID_PATTERN.match(value or ""))


def parse_year(value: Any) -> Optional[int]:
    """
    Reads the leading year of values like 2021, "2021" or "2021-05-03".
    """
    if value is None or value == "":
        return None
    head = str(value).strip().split("-")[0]
    try:
        return int(head)
    except ValueError:
        logger.debug("Could not parse year", value=value)
        return None


def doi_to_url(doi: Optional[str]) -> str:
    """Builds a resolver URL for a DOI, or "" when there is none."""
    doi = (doi or "").strip()
    return f"https://doi.org/{doi}" if doi else ""
