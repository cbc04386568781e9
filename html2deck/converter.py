from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from bs4 import BeautifulSoup, Comment, Doctype, NavigableString, PageElement, Tag
from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_SHAPE
from pptx.enum.text import PP_ALIGN
from pptx.util import Pt

from .deck import Deck
from .errors import FragmentConversionError
from .utils import (
    collapse_whitespace,
    log,
    normalize_newlines,
    parse_hex_color,
    parse_inline_style,
    parse_length_pt,
)


HEADING_SIZES: Dict[str, int] = {"h1": 36, "h2": 28, "h3": 24, "h4": 20, "h5": 18, "h6": 16}
BODY_FONT_SIZE = 16
DEFAULT_FONT = "Arial"

MARGIN_PT = 36.0
BLOCK_GAP_PT = 8.0
LINE_SPACING = 1.25
# Average glyph width as a fraction of the font size, used to guess line wraps.
GLYPH_WIDTH = 0.5
TABLE_ROW_PT = 24.0
DIMENSION_TOLERANCE_PT = 1.0

CONTAINER_TAGS = {"div", "section", "article", "header", "footer", "main", "aside", "nav", "figure"}
BLOCK_TAGS = set(HEADING_SIZES) | {"p", "ul", "ol", "table", "img"} | CONTAINER_TAGS
SKIPPED_TAGS = {"script", "style", "head", "title", "meta", "link", "noscript", "template"}

ALIGNMENTS = {"left": PP_ALIGN.LEFT, "center": PP_ALIGN.CENTER, "right": PP_ALIGN.RIGHT, "justify": PP_ALIGN.JUSTIFY}


@dataclass
class Box:
    """Absolute placement in points. Missing sides are filled in by the flow layout."""

    left: Optional[float] = None
    top: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None

    @property
    def is_positioned(self) -> bool:
        return self.left is not None and self.top is not None


@dataclass
class Block:
    kind: str  # "heading" | "text" | "list" | "table" | "image" | "shape"
    element: Optional[Tag]
    style: Dict[str, str] = field(default_factory=dict)
    box: Box = field(default_factory=Box)
    image_path: Optional[Path] = None
    # Inline siblings rendered together when the block has no element of its own.
    nodes: List[PageElement] = field(default_factory=list)


def _box_from_style(style: Dict[str, str]) -> Box:
    return Box(
        left=parse_length_pt(style.get("left")),
        top=parse_length_pt(style.get("top")),
        width=parse_length_pt(style.get("width")),
        height=parse_length_pt(style.get("height")),
    )


def get_text(element: Optional[Tag]) -> str:
    """Text content of an element with <br> kept as newlines and other whitespace collapsed."""
    if element is None:
        return ""
    return "\n".join(_split_lines(get_rich_text(element)))


def _split_lines(runs: List[Dict[str, Any]]) -> List[str]:
    lines = "".join(r["text"] for r in runs).split("\n")
    return [line.strip() for line in lines]


def get_rich_text(element: Tag) -> List[Dict[str, Any]]:
    """
    Flatten an element into formatted runs: [{"text", "bold", "italic"}].

    Bold and italic are inherited from b/strong and i/em ancestors up to
    `element`. Adjacent runs with the same formatting are merged.
    """
    return get_rich_text_of(list(element.children), element)


def _walk(nodes: List[PageElement]):
    for node in nodes:
        yield node
        if isinstance(node, Tag):
            yield from node.descendants


def get_rich_text_of(nodes: List[PageElement], root: Tag) -> List[Dict[str, Any]]:
    """Formatted runs for a run of sibling nodes under `root`."""
    runs: List[Dict[str, Any]] = []
    for child in _walk(nodes):
        if isinstance(child, Tag):
            if child.name == "br":
                runs.append({"text": "\n", "bold": False, "italic": False})
            continue
        if not isinstance(child, NavigableString) or isinstance(child, (Comment, Doctype)):
            continue
        if child.parent is None:
            continue
        if child.parent.name in SKIPPED_TAGS:
            continue
        text = collapse_whitespace(normalize_newlines(str(child)))
        if not text:
            continue
        bold = italic = False
        parent = child.parent
        while parent is not None and parent is not root:
            if parent.name in ("b", "strong"):
                bold = True
            elif parent.name in ("i", "em"):
                italic = True
            parent = parent.parent
        runs.append({"text": text, "bold": bold, "italic": italic})

    merged: List[Dict[str, Any]] = []
    for run in runs:
        if merged and merged[-1]["bold"] == run["bold"] and merged[-1]["italic"] == run["italic"]:
            merged[-1]["text"] += run["text"]
        else:
            merged.append(dict(run))
    if merged:
        merged[0]["text"] = merged[0]["text"].lstrip()
        merged[-1]["text"] = merged[-1]["text"].rstrip()
    return [r for r in merged if r["text"]]


class HtmlFragmentConverter:
    """
    Convert one HTML fragment file into one slide appended to a Deck.

    The fragment's <body> is the slide. Headings, paragraphs, lists, tables
    and images are laid out top to bottom inside the slide margins; elements
    with inline `left`/`top` are placed exactly where they say.
    """

    def __init__(self, *, parser: str = "lxml", verbose: bool = False) -> None:
        self.parser = parser
        self.verbose = verbose

    async def convert(self, fragment_path: Union[str, Path], deck: Deck):
        """
        Read, parse and render `fragment_path` onto a new slide of `deck`.

        Runs the blocking work in a worker thread; the caller awaits it before
        starting the next fragment.
        """
        return await asyncio.to_thread(self.convert_sync, fragment_path, deck)

    def convert_sync(self, fragment_path: Union[str, Path], deck: Deck):
        fragment_path = Path(fragment_path)
        name = fragment_path.name

        html = self._read(fragment_path)
        soup = BeautifulSoup(html, self.parser)
        body = soup.body
        if body is None:
            raise FragmentConversionError(name, "empty document")

        body_style = parse_inline_style(body.get("style"))
        self._check_dimensions(name, body_style, deck)

        blocks = self._collect_blocks(body, fragment_path.parent, name)
        if not blocks:
            raise FragmentConversionError(name, "no renderable content in <body>")

        if self.verbose:
            log(f"  {name}: {len(blocks)} block(s) on a {deck.width_in}x{deck.height_in}in slide")

        slide = deck.add_blank_slide(name)
        try:
            self._render(slide, blocks, body_style, deck)
        except Exception as e:
            deck.discard_last_slide()
            raise FragmentConversionError(name, f"rendering failed: {e}") from e
        return slide

    # ── Reading & validation ────────────────────────────────────────────

    def _read(self, path: Path) -> str:
        try:
            html = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise FragmentConversionError(path.name, f"file not found: {path}") from e
        except UnicodeDecodeError as e:
            raise FragmentConversionError(path.name, f"not valid UTF-8: {e}") from e
        except OSError as e:
            raise FragmentConversionError(path.name, f"cannot read {path}: {e}") from e
        if not html.strip():
            raise FragmentConversionError(path.name, "empty document")
        return html

    def _check_dimensions(self, name: str, body_style: Dict[str, str], deck: Deck) -> None:
        width = parse_length_pt(body_style.get("width"))
        height = parse_length_pt(body_style.get("height"))
        if width is None or height is None:
            return
        expected_w = deck.width_in * 72.0
        expected_h = deck.height_in * 72.0
        if abs(width - expected_w) > DIMENSION_TOLERANCE_PT or abs(height - expected_h) > DIMENSION_TOLERANCE_PT:
            raise FragmentConversionError(
                name,
                f"body is {width:g}pt x {height:g}pt but {deck.layout} is "
                f"{expected_w:g}pt x {expected_h:g}pt",
            )

    # ── Block collection ────────────────────────────────────────────────

    def _collect_blocks(self, root: Tag, base_dir: Path, name: str) -> List[Block]:
        blocks: List[Block] = []
        inline: List[PageElement] = []

        def flush() -> None:
            if inline and get_rich_text_of(inline, root):
                blocks.append(Block(kind="text", element=None, nodes=list(inline)))
            inline.clear()

        for child in root.children:
            if isinstance(child, (Comment, Doctype)):
                continue
            if isinstance(child, NavigableString):
                inline.append(child)
                continue
            if not isinstance(child, Tag) or child.name in SKIPPED_TAGS:
                continue
            if child.name not in BLOCK_TAGS:
                # Strings and inline tags between blocks render as one paragraph.
                inline.append(child)
                continue
            flush()

            style = parse_inline_style(child.get("style"))
            box = _box_from_style(style)

            if child.name in HEADING_SIZES or child.name == "p":
                if get_text(child):
                    kind = "text" if child.name == "p" else "heading"
                    blocks.append(Block(kind=kind, element=child, style=style, box=box))
            elif child.name in ("ul", "ol"):
                if child.find("li"):
                    blocks.append(Block(kind="list", element=child, style=style, box=box))
            elif child.name == "table":
                if child.find("tr"):
                    blocks.append(Block(kind="table", element=child, style=style, box=box))
            elif child.name == "img":
                blocks.append(self._image_block(child, style, box, base_dir, name))
            else:
                fill = parse_hex_color(style.get("background-color") or style.get("background"))
                if fill and box.is_positioned and box.width and box.height:
                    blocks.append(Block(kind="shape", element=child, style=style, box=box))
                blocks.extend(self._collect_blocks(child, base_dir, name))
        flush()
        return blocks

    def _image_block(self, img: Tag, style: Dict[str, str], box: Box, base_dir: Path, name: str) -> Block:
        src = (img.get("src") or "").strip()
        if not src:
            raise FragmentConversionError(name, "<img> without src")
        if "://" in src or src.startswith("data:"):
            raise FragmentConversionError(name, f"only local images are supported, got {src[:60]!r}")
        image_path = (base_dir / src).resolve()
        if not image_path.is_file():
            raise FragmentConversionError(name, f"image not found: {image_path}")
        if box.width is None:
            box.width = parse_length_pt(img.get("width"))
        if box.height is None:
            box.height = parse_length_pt(img.get("height"))
        return Block(kind="image", element=img, style=style, box=box, image_path=image_path)

    # ── Rendering ───────────────────────────────────────────────────────

    def _render(self, slide, blocks: List[Block], body_style: Dict[str, str], deck: Deck) -> None:
        background = parse_hex_color(body_style.get("background-color") or body_style.get("background"))
        if background:
            fill = slide.background.fill
            fill.solid()
            fill.fore_color.rgb = RGBColor.from_string(background)

        slide_w = deck.width_in * 72.0
        content_w = slide_w - 2 * MARGIN_PT
        cursor = MARGIN_PT
        body_color = parse_hex_color(body_style.get("color"))

        for block in blocks:
            box = block.box
            left = box.left if box.is_positioned else MARGIN_PT
            top = box.top if box.is_positioned else cursor
            width = box.width or (slide_w - left - MARGIN_PT if box.is_positioned else content_w)
            width = max(width, 1.0)

            if block.kind == "shape":
                self._add_shape(slide, block, left, top, width)
                continue
            if block.kind == "image":
                height = self._add_image(slide, block, left, top, width)
            elif block.kind == "table":
                height = self._add_table(slide, block, left, top, width)
            else:
                height = self._add_text(slide, block, left, top, width, body_color)

            if not box.is_positioned:
                cursor = top + height + BLOCK_GAP_PT

    def _add_shape(self, slide, block: Block, left: float, top: float, width: float) -> None:
        shape = slide.shapes.add_shape(
            MSO_SHAPE.RECTANGLE, Pt(left), Pt(top), Pt(width), Pt(block.box.height)
        )
        color = parse_hex_color(block.style.get("background-color") or block.style.get("background"))
        shape.fill.solid()
        shape.fill.fore_color.rgb = RGBColor.from_string(color)
        shape.line.fill.background()

    def _add_image(self, slide, block: Block, left: float, top: float, width: float) -> float:
        box = block.box
        kwargs: Dict[str, Any] = {}
        if box.width is not None:
            kwargs["width"] = Pt(box.width)
        if box.height is not None:
            kwargs["height"] = Pt(box.height)
        if not kwargs:
            kwargs["width"] = Pt(width)
        picture = slide.shapes.add_picture(str(block.image_path), Pt(left), Pt(top), **kwargs)
        return picture.height.pt

    def _add_table(self, slide, block: Block, left: float, top: float, width: float) -> float:
        rows = block.element.find_all("tr")
        cells_per_row = [row.find_all(["td", "th"]) for row in rows]
        n_cols = max((len(cells) for cells in cells_per_row), default=0)
        if n_cols == 0:
            return 0.0
        height = block.box.height or TABLE_ROW_PT * len(rows)
        table = slide.shapes.add_table(len(rows), n_cols, Pt(left), Pt(top), Pt(width), Pt(height)).table
        font_size = parse_length_pt(block.style.get("font-size")) or 12
        for r, cells in enumerate(cells_per_row):
            for c, cell_el in enumerate(cells):
                cell = table.cell(r, c)
                cell.text = get_text(cell_el)
                for paragraph in cell.text_frame.paragraphs:
                    for run in paragraph.runs:
                        run.font.size = Pt(font_size)
                        run.font.name = DEFAULT_FONT
                        run.font.bold = cell_el.name == "th"
        return height

    def _add_text(self, slide, block: Block, left: float, top: float, width: float,
                  inherited_color: Optional[str]) -> float:
        style = block.style
        if block.kind == "heading":
            default_size = HEADING_SIZES[block.element.name]
        else:
            default_size = BODY_FONT_SIZE
        font_size = parse_length_pt(style.get("font-size")) or default_size
        color = parse_hex_color(style.get("color")) or inherited_color
        align = ALIGNMENTS.get(style.get("text-align", "").lower())

        paragraphs = self._paragraphs_for(block)
        height = block.box.height or self._estimate_height(paragraphs, font_size, width)

        textbox = slide.shapes.add_textbox(Pt(left), Pt(top), Pt(width), Pt(height))
        tf = textbox.text_frame
        tf.word_wrap = True
        for idx, runs in enumerate(paragraphs):
            p = tf.paragraphs[0] if idx == 0 else tf.add_paragraph()
            if align is not None:
                p.alignment = align
            for r in runs:
                run = p.add_run()
                run.text = r["text"]
                run.font.name = DEFAULT_FONT
                run.font.size = Pt(font_size)
                run.font.bold = r["bold"] or block.kind == "heading"
                run.font.italic = r["italic"]
                if color:
                    run.font.color.rgb = RGBColor.from_string(color)
        return height

    def _paragraphs_for(self, block: Block) -> List[List[Dict[str, Any]]]:
        if block.kind == "list":
            ordered = block.element.name == "ol"
            paragraphs = []
            for number, li in enumerate(block.element.find_all("li", recursive=False), start=1):
                marker = f"{number}. " if ordered else "• "
                runs = get_rich_text(li)
                paragraphs.append([{"text": marker, "bold": False, "italic": False}] + runs)
            return paragraphs

        # Split on <br> so each visual line is its own paragraph.
        paragraphs: List[List[Dict[str, Any]]] = [[]]
        if block.element is None:
            runs = get_rich_text_of(block.nodes, block.nodes[0].parent)
        else:
            runs = get_rich_text(block.element)
        for r in runs:
            parts = r["text"].split("\n")
            for i, part in enumerate(parts):
                if i > 0:
                    paragraphs.append([])
                if part:
                    paragraphs[-1].append({**r, "text": part})
        return [p for p in paragraphs if "".join(r["text"] for r in p).strip()] or [[]]

    def _estimate_height(self, paragraphs: List[List[Dict[str, Any]]], font_size: float, width: float) -> float:
        chars_per_line = max(1, int(width / (font_size * GLYPH_WIDTH)))
        lines = 0
        for runs in paragraphs:
            length = sum(len(r["text"]) for r in runs)
            lines += max(1, -(-length // chars_per_line))
        return lines * font_size * LINE_SPACING + 8.0
