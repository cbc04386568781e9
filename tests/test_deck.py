from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest
from pptx import Presentation

from html2deck import ConfigurationError, Deck, SerializationError


@pytest.fixture
def umask_022():
    previous = os.umask(0o022)
    try:
        yield
    finally:
        os.umask(previous)


def test_save_writes_metadata_and_slides(tmp_path: Path) -> None:
    deck = Deck(layout="LAYOUT_4x3", author="Ops", title="Runbook")
    deck.add_blank_slide("a.html")
    deck.add_blank_slide("b.html")

    out = deck.save(tmp_path / "nested" / "deck.pptx")

    prs = Presentation(str(out))
    assert len(prs.slides) == 2
    assert prs.core_properties.author == "Ops"
    assert prs.core_properties.title == "Runbook"
    assert deck.fragment_names == ["a.html", "b.html"]


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_saved_file_follows_umask(tmp_path: Path, umask_022) -> None:
    deck = Deck()
    deck.add_blank_slide("a.html")

    out = deck.save(tmp_path / "deck.pptx")

    assert stat.S_IMODE(out.stat().st_mode) == 0o644


def test_failed_save_leaves_no_temporary_file(tmp_path: Path, monkeypatch) -> None:
    deck = Deck()
    deck.add_blank_slide("a.html")

    def _explode(self, path):
        Path(path).write_bytes(b"partial")
        raise RuntimeError("writer crashed")

    monkeypatch.setattr(type(deck.prs), "save", _explode)

    with pytest.raises(RuntimeError, match="writer crashed"):
        deck.save(tmp_path / "deck.pptx")

    assert list(tmp_path.iterdir()) == []


def test_os_error_during_save_is_a_serialization_error(tmp_path: Path, monkeypatch) -> None:
    deck = Deck()
    deck.add_blank_slide("a.html")

    def _disk_full(self, path):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(type(deck.prs), "save", _disk_full)

    with pytest.raises(SerializationError):
        deck.save(tmp_path / "deck.pptx")

    assert list(tmp_path.iterdir()) == []


def test_discard_last_slide_drops_fragment_record() -> None:
    deck = Deck()
    deck.add_blank_slide("a.html")
    deck.add_blank_slide("b.html")

    deck.discard_last_slide()

    assert deck.slide_count == 1
    assert deck.fragment_names == ["a.html"]


def test_unknown_layout_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        Deck(layout="LAYOUT_BANNER")
