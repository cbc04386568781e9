from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from html2deck import DEFAULT_FRAGMENTS, Deck, FragmentConversionError


def fragment_html(heading: str, body_style: str = "width: 720pt; height: 405pt;", extra: str = "") -> str:
    return (
        "<!DOCTYPE html><html><head><style>body { margin: 0; }</style></head>"
        f'<body style="{body_style}"><h1>{heading}</h1>{extra}</body></html>'
    )


@pytest.fixture
def write_fragment(tmp_path: Path) -> Callable[..., Path]:
    def _write(name: str, heading: str = "", **kwargs) -> Path:
        path = tmp_path / name
        path.write_text(fragment_html(heading or name, **kwargs), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def default_slide_dir(tmp_path: Path, write_fragment) -> Path:
    for idx, name in enumerate(DEFAULT_FRAGMENTS, start=1):
        write_fragment(name, heading=f"Slide {idx}")
    return tmp_path


class RecordingConverter:
    """Converter stand-in that appends blank slides and fails on request."""

    def __init__(self, fail_on: tuple[str, ...] = ()) -> None:
        self.fail_on = set(fail_on)
        self.calls: list[str] = []

    async def convert(self, fragment_path, deck: Deck):
        name = Path(fragment_path).name
        self.calls.append(name)
        if name in self.fail_on:
            raise FragmentConversionError(name, "boom")
        return deck.add_blank_slide(name)


@pytest.fixture
def recording_converter() -> type[RecordingConverter]:
    return RecordingConverter


def slide_texts(pptx_path: Path) -> list[str]:
    """First text frame of every slide, in order."""
    from pptx import Presentation

    texts = []
    for slide in Presentation(str(pptx_path)).slides:
        frames = [s.text_frame.text for s in slide.shapes if s.has_text_frame]
        texts.append(frames[0] if frames else "")
    return texts
