from __future__ import annotations

from pathlib import Path
from typing import Union


class DeckAssemblyError(Exception):
    """
    Base class for every error raised while assembling a deck.
    """


class ConfigurationError(DeckAssemblyError):
    pass


class FragmentConversionError(DeckAssemblyError):
    """
    A fragment could not be read or converted into a slide.

    `index` is the zero-based position in the fragment sequence. It is None
    when the converter is called outside an assembler run and the assembler
    fills it in before re-raising.
    """

    def __init__(self, fragment: str, reason: str, index: int | None = None) -> None:
        self.fragment = fragment
        self.reason = reason
        self.index = index
        super().__init__(self._format())

    def _format(self) -> str:
        if self.index is None:
            return f"failed to convert {self.fragment}: {self.reason}"
        return f"failed to convert fragment #{self.index} ({self.fragment}): {self.reason}"

    def at_index(self, index: int) -> "FragmentConversionError":
        err = FragmentConversionError(self.fragment, self.reason, index=index)
        err.__cause__ = self.__cause__
        return err


class SerializationError(DeckAssemblyError):
    def __init__(self, path: Union[str, Path], reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"failed to write {self.path}: {reason}")
