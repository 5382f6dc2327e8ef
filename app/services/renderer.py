# app/services/renderer.py
"""HTML → PDF conversion through the external ``wkhtmltopdf`` binary."""
import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Literal, Protocol

from app.background import run_sync
from app.settings.config import settings

logger = logging.getLogger(__name__)


class RenderError(Exception):
    pass


@dataclass(frozen=True)
class PageLayout:
    color_mode: Literal["color", "grayscale"] = "color"
    orientation: Literal["Portrait", "Landscape"] = "Portrait"
    page_size: str = "A4"
    margin_top_mm: int = 10


BOOK_LAYOUT = PageLayout()


class BookRenderer(Protocol):
    async def render(self, markup: str, layout: PageLayout) -> bytes: ...


class WkhtmltopdfRenderer:
    def __init__(self, binary: str | None = None, timeout: float | None = None):
        self.binary = binary or settings.WKHTMLTOPDF_PATH
        self.timeout = timeout

    def command(self, layout: PageLayout) -> list[str]:
        cmd = [
            self.binary,
            "--quiet",
            "--encoding", "utf-8",
            "--orientation", layout.orientation,
            "--page-size", layout.page_size,
            "--margin-top", f"{layout.margin_top_mm}mm",
        ]
        if layout.color_mode == "grayscale":
            cmd.append("--grayscale")
        # read markup from stdin, write the PDF to stdout
        cmd += ["-", "-"]
        return cmd

    def render_blocking(self, markup: str, layout: PageLayout) -> bytes:
        if shutil.which(self.binary) is None:
            raise RenderError(f"{self.binary} not found")
        try:
            proc = subprocess.run(
                self.command(layout),
                input=markup.encode("utf-8"),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
                timeout=self.timeout,
            )
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or b"").decode("utf-8", "replace").strip()
            raise RenderError(f"exit code {e.returncode}: {stderr[:500]}") from e
        except (OSError, subprocess.TimeoutExpired) as e:
            raise RenderError(str(e)) from e
        if not proc.stdout:
            raise RenderError("empty document")
        return proc.stdout

    async def render(self, markup: str, layout: PageLayout) -> bytes:
        pdf = await run_sync(self.render_blocking, markup, layout)
        logger.info("Rendered %d byte(s) of markup into %d byte PDF", len(markup), len(pdf))
        return pdf


def get_book_renderer() -> BookRenderer:
    return WkhtmltopdfRenderer()
