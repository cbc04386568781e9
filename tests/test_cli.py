from __future__ import annotations

from pathlib import Path

from pptx import Presentation

from html2deck import cli_entry


def test_cli_builds_default_deck(default_slide_dir: Path, tmp_path: Path, capsys) -> None:
    out = tmp_path / "deck.pptx"

    exit_code = cli_entry.main(["--base-dir", str(default_slide_dir), "--out", str(out)])

    stdout = capsys.readouterr().out
    assert exit_code == 0
    assert "[html2deck] Processing slide01-title.html..." in stdout
    assert "Presentation created successfully" in stdout
    prs = Presentation(str(out))
    assert len(prs.slides) == 12
    assert prs.core_properties.title == "Hospital Microservice Architecture"
    assert prs.core_properties.author == "Acme AI Solution"


def test_cli_positional_fragments_and_metadata(tmp_path: Path, write_fragment, capsys) -> None:
    write_fragment("b.html")
    write_fragment("a.html")
    out = tmp_path / "talk.pptx"

    exit_code = cli_entry.main(
        ["-d", str(tmp_path), "b.html", "a.html", "-o", str(out), "--title", "Talk", "--author", "Me"]
    )

    assert exit_code == 0
    prs = Presentation(str(out))
    assert len(prs.slides) == 2
    assert prs.core_properties.title == "Talk"
    assert prs.core_properties.author == "Me"


def test_cli_reports_failing_fragment_and_exits_nonzero(tmp_path: Path, write_fragment, capsys) -> None:
    write_fragment("a.html")
    out = tmp_path / "deck.pptx"

    exit_code = cli_entry.main(["-d", str(tmp_path), "a.html", "ghost.html", "-o", str(out)])

    captured = capsys.readouterr()
    assert exit_code == 1
    assert "ghost.html" in captured.err
    assert "#1" in captured.err
    assert not out.exists()


def test_cli_reads_manifest(tmp_path: Path, write_fragment) -> None:
    write_fragment("one.html")
    write_fragment("two.html")
    manifest = tmp_path / "order.txt"
    manifest.write_text("two.html\none.html\n", encoding="utf-8")
    out = tmp_path / "deck.pptx"

    exit_code = cli_entry.main(["-d", str(tmp_path), "--manifest", str(manifest), "-o", str(out)])

    assert exit_code == 0
    assert len(Presentation(str(out)).slides) == 2


def test_cli_rejects_manifest_with_positional_fragments(tmp_path: Path, capsys) -> None:
    manifest = tmp_path / "order.txt"
    manifest.write_text("a.html\n", encoding="utf-8")

    exit_code = cli_entry.main(["-d", str(tmp_path), "a.html", "--manifest", str(manifest)])

    assert exit_code == 1
    assert "not both" in capsys.readouterr().err


def test_cli_rejects_missing_base_dir(tmp_path: Path, capsys) -> None:
    exit_code = cli_entry.main(["-d", str(tmp_path / "nowhere")])

    assert exit_code == 1
    assert "not a directory" in capsys.readouterr().err
