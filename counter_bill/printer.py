"""Print sinks for rendered receipts.

The USB sink draws every receipt line onto a 1-bit Pillow canvas the width
of the roll and streams it through python-escpos, so glyphs missing from the
printer's code pages (the rupee sign) still print. The spool sink writes the
plain-text rendition to disk for counters that have no printer attached.
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Protocol

from counter_bill import config
from counter_bill.config import (
    PRINTER_FONT_PATH,
    PRINTER_FONT_PATH_ENV,
    PRINTER_FONT_SIZE,
    PRINTER_LARGE_FONT_SIZE,
    PRINTER_LEFT_INDENT_PX,
    PRINTER_TAIL_SPACER_PX,
    PRINTER_USB_PRODUCT_ID,
    PRINTER_USB_VENDOR_ID,
    PRINTER_WIDTH_PX,
)
from counter_bill.debug_log import log_debug
from counter_bill.errors import PrintDispatchError
from counter_bill.receipt import Align, LineStyle, ReceiptDocument, ReceiptLine

_LINE_PADDING_PX = 6
_SEPARATOR_HEIGHT_PX = 10
_SEPARATOR_THICKNESS_PX = 2
_BOLD_STROKE_PX = 1
_LINUX_FONT_FALLBACKS = (
    "/usr/share/fonts/TTF/DejaVuSansMono.ttf",
    "/usr/share/fonts/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationMono-Regular.ttf",
    "/usr/share/fonts/liberation/LiberationMono-Regular.ttf",
    "/usr/share/fonts/noto/NotoSansMono-Regular.ttf",
)


class PrintDispatcher(Protocol):
    async def dispatch(self, document: ReceiptDocument) -> None:
        """Deliver ``document`` or raise PrintDispatchError."""


@dataclass(frozen=True)
class PrinterFonts:
    normal: object
    large: object


def resolve_printer_font_path() -> str:
    """
    Resolve a monospaced printer font path.

    Resolution order:
    1. COUNTER_BILL_PRINTER_FONT_PATH (if set)
    2. PRINTER_FONT_PATH
    3. Known Linux fallbacks
    """
    env_override = os.environ.get(PRINTER_FONT_PATH_ENV, "").strip()
    candidates: list[str] = []
    if env_override:
        candidates.append(env_override)
    candidates.append(PRINTER_FONT_PATH)
    candidates.extend(_LINUX_FONT_FALLBACKS)

    seen: set[str] = set()
    for candidate in candidates:
        if not candidate or candidate in seen:
            continue
        seen.add(candidate)
        if Path(candidate).is_file():
            return candidate

    raise RuntimeError(
        f"No usable printer font found. Set {PRINTER_FONT_PATH_ENV} to a valid .ttf/.otf file. "
        f"Tried: {', '.join(seen)}"
    )


def load_printer_fonts() -> PrinterFonts:
    from PIL import ImageFont

    font_path = resolve_printer_font_path()
    return PrinterFonts(
        normal=ImageFont.truetype(font_path, PRINTER_FONT_SIZE),
        large=ImageFont.truetype(font_path, PRINTER_LARGE_FONT_SIZE),
    )


def check_printer_dependencies() -> tuple[bool, str]:
    """Check whether the configured print backend can be used."""
    if config.printer_backend() == "spool":
        return (True, f"Spooling receipts to {config.SPOOL_DIR}")
    try:
        from escpos.printer import Usb  # noqa: F401

        load_printer_fonts()
    except Exception as exc:
        return (False, f"Printer deps unavailable: {exc}")
    return (True, "Printer ready")


def _line_x(line: ReceiptLine, text_width: int) -> int:
    if line.align is Align.CENTER:
        return max(0, (PRINTER_WIDTH_PX - text_width) // 2)
    if line.align is Align.RIGHT:
        return max(0, PRINTER_WIDTH_PX - PRINTER_LEFT_INDENT_PX - text_width)
    return PRINTER_LEFT_INDENT_PX


def render_separator() -> object:
    from PIL import Image, ImageDraw

    img = Image.new("1", (PRINTER_WIDTH_PX, _SEPARATOR_HEIGHT_PX), color=1)
    draw = ImageDraw.Draw(img)
    top = (_SEPARATOR_HEIGHT_PX - _SEPARATOR_THICKNESS_PX) // 2
    draw.rectangle((0, top, PRINTER_WIDTH_PX - 1, top + _SEPARATOR_THICKNESS_PX - 1), fill=0)
    return img


def render_spacer(height_px: int) -> object:
    from PIL import Image

    return Image.new("1", (PRINTER_WIDTH_PX, max(1, height_px)), color=1)


def render_receipt_line(line: ReceiptLine, fonts: PrinterFonts) -> object:
    """Draw one receipt line onto a full-width 1-bit canvas."""
    from PIL import Image, ImageDraw

    if line.is_separator:
        return render_separator()

    font = fonts.large if line.style is LineStyle.LARGE else fonts.normal
    stroke = _BOLD_STROKE_PX if line.style is not LineStyle.NORMAL else 0
    text = line.text or " "

    probe = Image.new("1", (1, 1), color=1)
    probe_draw = ImageDraw.Draw(probe)
    bbox = probe_draw.textbbox((0, 0), text, font=font, stroke_width=stroke)
    text_width = bbox[2] - bbox[0]
    text_height = bbox[3] - bbox[1]
    canvas_height = max(12, text_height + _LINE_PADDING_PX)

    img = Image.new("1", (PRINTER_WIDTH_PX, canvas_height), color=1)
    draw = ImageDraw.Draw(img)
    x = _line_x(line, text_width) - bbox[0]
    # Offset by bbox top so descenders are not clipped.
    y = (canvas_height - text_height) // 2 - bbox[1]
    if stroke:
        draw.text((x, y), text, font=font, fill=0, stroke_width=stroke, stroke_fill=0)
    else:
        draw.text((x, y), text, font=font, fill=0)
    return img


def render_document_images(document: ReceiptDocument, fonts: PrinterFonts) -> list[object]:
    images = [render_receipt_line(line, fonts) for line in document.lines]
    # Extra tail so the closing message clears the tear bar.
    images.append(render_spacer(PRINTER_TAIL_SPACER_PX))
    return images


class EscposPrintDispatcher:
    """Send receipts to the USB thermal printer."""

    def __init__(
        self,
        vendor_id: int = PRINTER_USB_VENDOR_ID,
        product_id: int = PRINTER_USB_PRODUCT_ID,
    ) -> None:
        self.vendor_id = vendor_id
        self.product_id = product_id

    def _open_printer(self) -> object:
        from escpos.printer import Usb

        return Usb(self.vendor_id, self.product_id)

    def print_document(self, document: ReceiptDocument) -> None:
        """Blocking print of the whole document followed by a cut."""
        try:
            fonts = load_printer_fonts()
            images = render_document_images(document, fonts)
            printer = self._open_printer()
        except Exception as exc:
            raise PrintDispatchError(f"Printer unavailable: {exc}") from exc

        try:
            for img in images:
                printer.image(img)
            printer.cut()
        except Exception as exc:
            raise PrintDispatchError(f"Print failed: {exc}") from exc
        finally:
            close = getattr(printer, "close", None)
            if close is not None:
                try:
                    close()
                except Exception as exc:
                    log_debug(f"printer_close_failed error={exc!r}")

    async def dispatch(self, document: ReceiptDocument) -> None:
        log_debug(f"usb_dispatch lines={len(document.lines)}")
        await asyncio.to_thread(self.print_document, document)


class SpoolPrintDispatcher:
    """Write the plain-text receipt to a spool directory."""

    def __init__(self, spool_dir: str | Path = config.SPOOL_DIR) -> None:
        self.spool_dir = Path(spool_dir)

    def write_document(self, document: ReceiptDocument) -> Path:
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
        target = self.spool_dir / f"receipt-{stamp}.txt"
        try:
            self.spool_dir.mkdir(parents=True, exist_ok=True)
            target.write_text(document.to_text(), encoding="utf-8")
        except OSError as exc:
            raise PrintDispatchError(f"Could not spool receipt: {exc}") from exc
        return target

    async def dispatch(self, document: ReceiptDocument) -> None:
        target = await asyncio.to_thread(self.write_document, document)
        log_debug(f"spool_dispatch path={str(target)!r}")


def make_dispatcher(backend: str | None = None) -> PrintDispatcher:
    backend = backend or config.printer_backend()
    if backend == "spool":
        return SpoolPrintDispatcher()
    if backend == "usb":
        return EscposPrintDispatcher()
    raise ValueError(f"Unknown printer backend: {backend!r}")
