"""
License identifiers and the SPDX license list.

License texts come from the SPDX license list shipped with ``spdx_lookup``.
Declared identifiers and expressions are parsed with ``license_expression``
against the SPDX license index. License keys are lower-cased SPDX ids with the
``-only`` / ``-or-later`` / ``+`` qualifiers removed, e.g. ``GPL-3.0-only``
becomes ``gpl-3.0``.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import spdx_lookup
from license_expression import ExpressionError, get_spdx_licensing

NO_LICENSE_KEY = "no-license"
OTHER_KEY = "other"
NONE_KEY = "none"

_QUALIFIER = re.compile(r"(-only|-or-later|\+)$", re.IGNORECASE)

_spdx_licensing = get_spdx_licensing()


@dataclass(frozen=True)
class License:
    """A license from the SPDX license list."""

    key: str
    spdx_id: str
    name: str
    text: Optional[str] = None


# Free-form names seen in manifests that are not SPDX ids or aliases
LICENSE_ALIASES: Dict[str, str] = {
    "expat": "mit",
    "mit/x11": "mit",
    "apache 2": "apache-2.0",
    "apache 2.0": "apache-2.0",
    "apache-2": "apache-2.0",
    "apache license 2.0": "apache-2.0",
    "apache license, version 2.0": "apache-2.0",
    "apache software license": "apache-2.0",
    "asl 2.0": "apache-2.0",
    "new bsd": "bsd-3-clause",
    "bsd-3": "bsd-3-clause",
    "bsd 3-clause": "bsd-3-clause",
    "simplified bsd": "bsd-2-clause",
    "bsd-2": "bsd-2-clause",
    "bsd 2-clause": "bsd-2-clause",
    "gplv2": "gpl-2.0",
    "gpl-2": "gpl-2.0",
    "gplv3": "gpl-3.0",
    "gpl-3": "gpl-3.0",
    "lgplv3": "lgpl-3.0",
    "mpl 2.0": "mpl-2.0",
    "public domain": "unlicense",
    "boost": "bsl-1.0",
}


def license_key(spdx_id: str) -> str:
    """Convert an SPDX license id to a license key."""
    return _QUALIFIER.sub("", spdx_id.strip()).lower()


def parse_spdx_expression(expression: str) -> Optional[Tuple[List[str], List[str]]]:
    """
    Parse a declared SPDX license expression.

    Args:
        expression: Declared expression such as ``MIT`` or ``MIT OR Apache-2.0``

    Returns:
        Optional[Tuple[List[str], List[str]]]: Canonical license and exception
        ids in the expression and the ids that are not on the SPDX list, or
        None if the expression cannot be parsed
    """
    try:
        parsed = _spdx_licensing.parse(expression)
    except ExpressionError:
        return None
    if parsed is None:
        return None
    return (
        _spdx_licensing.license_keys(parsed, unique=True),
        _spdx_licensing.unknown_license_keys(parsed, unique=True),
    )


def find_license(identifier: str) -> Optional[License]:
    """Look up a license on the SPDX list by id or key, case-insensitively."""
    if not identifier or not identifier.strip():
        return None

    parsed = parse_spdx_expression(identifier.strip())
    candidates = [identifier.strip()]
    if parsed is not None and len(parsed[0]) == 1 and not parsed[1]:
        spdx_id = parsed[0][0]
        candidates = [spdx_id, _QUALIFIER.sub("", spdx_id)] + candidates

    for candidate in candidates:
        lic = spdx_lookup.by_id(candidate)
        if lic:
            return License(license_key(lic.id), lic.id, lic.name, lic.template)
    return None
