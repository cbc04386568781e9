"""
html2deck - Assemble a PowerPoint deck from HTML slide fragments.

This package provides the core building blocks:

- DeckAssembler: convert an ordered fragment list into one saved deck
- Deck: the in-memory presentation being built (python-pptx)
- HtmlFragmentConverter: turn one HTML fragment into one slide
- DeckConfig: what to read, in which order, and where to write
"""

from .assembler import AssemblerState, AssemblyResult, DeckAssembler, assemble
from .converter import HtmlFragmentConverter
from .deck import Deck
from .errors import (
    ConfigurationError,
    DeckAssemblyError,
    FragmentConversionError,
    SerializationError,
)
from .fragments import DEFAULT_FRAGMENTS, load_manifest
from .utils import LAYOUTS, DeckConfig

__all__ = [
    "AssemblerState",
    "AssemblyResult",
    "ConfigurationError",
    "DEFAULT_FRAGMENTS",
    "Deck",
    "DeckAssembler",
    "DeckAssemblyError",
    "DeckConfig",
    "FragmentConversionError",
    "HtmlFragmentConverter",
    "LAYOUTS",
    "SerializationError",
    "assemble",
    "load_manifest",
]
