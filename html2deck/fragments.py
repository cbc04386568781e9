"""
Default fragment sequence and deck metadata for html2deck.

The CLI falls back to these when no fragments or manifest are given, so a
directory holding the twelve slide files builds with a bare `html2deck`.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

from .errors import ConfigurationError


DEFAULT_FRAGMENTS: List[str] = [
    "slide01-title.html",
    "slide02-executive-summary.html",
    "slide03-architecture-overview.html",
    "slide04-presentation-layer.html",
    "slide05-infrastructure.html",
    "slide06-microservices.html",
    "slide07-data-layer.html",
    "slide08-integration.html",
    "slide09-security.html",
    "slide10-deployment.html",
    "slide11-benefits.html",
    "slide12-roadmap.html",
]

DEFAULT_LAYOUT = "LAYOUT_16x9"
DEFAULT_AUTHOR = "Acme AI Solution"
DEFAULT_TITLE = "Hospital Microservice Architecture"
DEFAULT_OUTPUT = "acme-ai-cto-presentation.pptx"


def load_manifest(path: Union[str, Path]) -> List[str]:
    """
    Read fragment names from a manifest file, one per line.

    Blank lines and lines starting with '#' are ignored. Order is kept and
    duplicates are not removed.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"cannot read manifest {path}: {e}") from e

    names: List[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        names.append(stripped)
    if not names:
        raise ConfigurationError(f"manifest {path} lists no fragments")
    return names
