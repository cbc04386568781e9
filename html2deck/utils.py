from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .errors import ConfigurationError
from .fragments import (
    DEFAULT_AUTHOR,
    DEFAULT_FRAGMENTS,
    DEFAULT_LAYOUT,
    DEFAULT_OUTPUT,
    DEFAULT_TITLE,
)


# Slide sizes in inches, keyed by the pptxgenjs layout names.
LAYOUTS: Dict[str, Tuple[float, float]] = {
    "LAYOUT_16x9": (10.0, 5.625),
    "LAYOUT_16x10": (10.0, 6.25),
    "LAYOUT_4x3": (10.0, 7.5),
    "LAYOUT_WIDE": (13.333, 7.5),
}

PX_TO_PT = 0.75


def ensure_path(path: Path) -> None:
    """
    Ensure directory exists (mkdir -p).
    """
    path.mkdir(parents=True, exist_ok=True)


def log(message: str) -> None:
    """
    Lightweight logging helper for CLI.
    """
    print(f"[html2deck] {message}")


@dataclass
class DeckConfig:
    """
    Everything one assembler run needs: where fragments live, which ones,
    in what order, and what to write.
    """

    base_dir: Path
    fragments: List[str] = field(default_factory=lambda: list(DEFAULT_FRAGMENTS))
    output_path: Path = Path(DEFAULT_OUTPUT)
    layout: str = DEFAULT_LAYOUT
    author: str = DEFAULT_AUTHOR
    title: str = DEFAULT_TITLE

    def validate(self) -> None:
        if not self.fragments:
            raise ConfigurationError("at least one fragment is required")
        if self.layout not in LAYOUTS:
            known = ", ".join(sorted(LAYOUTS))
            raise ConfigurationError(f"unknown layout {self.layout!r} (expected one of: {known})")

    def resolve(self, fragment: str) -> Path:
        return Path(self.base_dir) / fragment


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text)


def parse_inline_style(style: Optional[str]) -> Dict[str, str]:
    """
    Parse a `style="a: b; c: d"` attribute into a lowercase-keyed dict.
    """
    result: Dict[str, str] = {}
    if not style:
        return result
    for decl in style.split(";"):
        if ":" not in decl:
            continue
        key, _, value = decl.partition(":")
        key = key.strip().lower()
        value = value.strip()
        if key and value:
            result[key] = value
    return result


_LENGTH_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(pt|px|in)?\s*$", re.IGNORECASE)


def parse_length_pt(value: Optional[str]) -> Optional[float]:
    """
    Convert a CSS length (pt, px or in; bare numbers are px) to points.
    Returns None for anything else (percentages, keywords, garbage).
    """
    if not value:
        return None
    m = _LENGTH_RE.match(value)
    if not m:
        return None
    number = float(m.group(1))
    unit = (m.group(2) or "px").lower()
    if unit == "pt":
        return number
    if unit == "in":
        return number * 72.0
    return number * PX_TO_PT


_HEX_RE = re.compile(r"#([0-9a-fA-F]{6}|[0-9a-fA-F]{3})\b")


def parse_hex_color(value: Optional[str]) -> Optional[str]:
    """
    Pull the first #RGB / #RRGGBB out of a CSS value, returned as 'RRGGBB'.
    """
    if not value:
        return None
    m = _HEX_RE.search(value)
    if not m:
        return None
    hex_str = m.group(1)
    if len(hex_str) == 3:
        hex_str = "".join(c * 2 for c in hex_str)
    return hex_str.upper()
