from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .converter import HtmlFragmentConverter
from .deck import Deck
from .errors import FragmentConversionError
from .utils import DeckConfig, log


class AssemblerState(enum.Enum):
    NOT_STARTED = "not_started"
    PROCESSING = "processing"
    SERIALIZING = "serializing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class AssemblyResult:
    output_path: Path
    slide_count: int
    fragments: List[str]


class DeckAssembler:
    """
    Build one deck from an ordered list of HTML fragments.

    Each fragment is converted in turn, strictly one after another, onto a
    fresh Deck; the Deck is saved only after every fragment converted. The
    first failing fragment ends the run and nothing is written.

    `converter` is anything with an awaitable `convert(path, deck)` that
    appends exactly one slide; it defaults to HtmlFragmentConverter.
    """

    def __init__(self, config: DeckConfig, *, converter=None, verbose: bool = False) -> None:
        self.config = config
        self.converter = converter or HtmlFragmentConverter(verbose=verbose)
        self.verbose = verbose
        self.state = AssemblerState.NOT_STARTED
        self.current_index: Optional[int] = None

    async def run(self) -> AssemblyResult:
        self.config.validate()
        self.state = AssemblerState.PROCESSING
        self.current_index = None

        deck = Deck(layout=self.config.layout, author=self.config.author, title=self.config.title)
        try:
            for index, fragment in enumerate(self.config.fragments):
                self.current_index = index
                fragment_path = self.config.resolve(fragment)
                log(f"Processing {fragment}...")
                if self.verbose:
                    log(f"  resolved to {fragment_path}")
                try:
                    await self.converter.convert(fragment_path, deck)
                except FragmentConversionError as e:
                    raise e.at_index(index) from e.__cause__
                except Exception as e:
                    raise FragmentConversionError(fragment, str(e), index=index) from e
                if deck.slide_count != index + 1:
                    raise FragmentConversionError(
                        fragment,
                        f"converter left the deck with {deck.slide_count} slide(s), expected {index + 1}",
                        index=index,
                    )

            self.state = AssemblerState.SERIALIZING
            output_path = await asyncio.to_thread(deck.save, self.config.output_path)
        except Exception:
            self.state = AssemblerState.FAILED
            raise

        self.state = AssemblerState.DONE
        log(f"Presentation created successfully: {output_path}")
        return AssemblyResult(
            output_path=output_path,
            slide_count=deck.slide_count,
            fragments=deck.fragment_names,
        )


def assemble(config: DeckConfig, *, converter=None, verbose: bool = False) -> AssemblyResult:
    """
    Run a DeckAssembler to completion from synchronous code.
    """
    return asyncio.run(DeckAssembler(config, converter=converter, verbose=verbose).run())
