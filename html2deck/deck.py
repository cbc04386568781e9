from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import List, Union

from pptx import Presentation
from pptx.util import Inches

from .errors import ConfigurationError, SerializationError
from .utils import LAYOUTS, ensure_path


BLANK_LAYOUT_INDEX = 6


def _current_umask() -> int:
    # os.umask can only be read by setting it.
    mask = os.umask(0)
    os.umask(mask)
    return mask


class Deck:
    """
    In-memory presentation being assembled.

    Wraps a python-pptx Presentation sized for one of the LAYOUTS and keeps,
    for each slide, the name of the fragment that produced it. Slides are
    appended in order; only a conversion that fails midway removes its own.
    """

    def __init__(self, *, layout: str = "LAYOUT_16x9", author: str = "", title: str = "") -> None:
        if layout not in LAYOUTS:
            raise ConfigurationError(f"unknown layout {layout!r}")
        self.layout = layout
        self.author = author
        self.title = title

        self.prs = Presentation()
        width_in, height_in = LAYOUTS[layout]
        self.prs.slide_width = Inches(width_in)
        self.prs.slide_height = Inches(height_in)
        self.prs.core_properties.author = author
        self.prs.core_properties.title = title

        self._fragments: List[str] = []

    @property
    def width_in(self) -> float:
        return LAYOUTS[self.layout][0]

    @property
    def height_in(self) -> float:
        return LAYOUTS[self.layout][1]

    @property
    def slide_count(self) -> int:
        return len(self.prs.slides)

    @property
    def fragment_names(self) -> List[str]:
        return list(self._fragments)

    def add_blank_slide(self, fragment_name: str):
        slide = self.prs.slides.add_slide(self.prs.slide_layouts[BLANK_LAYOUT_INDEX])
        self._fragments.append(fragment_name)
        return slide

    def discard_last_slide(self) -> None:
        sld_id = self.prs.slides._sldIdLst[-1]
        self.prs.part.drop_rel(sld_id.rId)
        self.prs.slides._sldIdLst.remove(sld_id)
        self._fragments.pop()

    def save(self, output_path: Union[str, Path]) -> Path:
        """
        Write the deck to `output_path`.

        The file is written next to its destination under a temporary name and
        renamed into place, so the destination only ever holds a complete deck.
        """
        output_path = Path(output_path)
        try:
            ensure_path(output_path.parent)
            fd, tmp_name = tempfile.mkstemp(
                dir=str(output_path.parent), prefix=f".{output_path.name}.", suffix=".tmp"
            )
        except OSError as e:
            raise SerializationError(output_path, str(e)) from e

        os.close(fd)
        try:
            self.prs.save(tmp_name)
            os.chmod(tmp_name, 0o666 & ~_current_umask())
            os.replace(tmp_name, output_path)
        except BaseException as e:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            if isinstance(e, OSError):
                raise SerializationError(output_path, str(e)) from e
            raise
        return output_path
