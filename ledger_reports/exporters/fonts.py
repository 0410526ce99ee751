"""
Font Resource Loader

PDF tables mix Japanese structured columns with Simplified Chinese free-text
memos, so two TrueType fonts are embedded in every document. The files are
large: they are fetched once per process and every concurrent first caller
awaits the same in-flight fetch.

States:
    UNLOADED -> LOADING (holds the pending task) -> LOADED (holds the bytes)
    LOADING  -> UNLOADED on any failure, so nothing partial is cached
"""
import asyncio
from dataclasses import dataclass
from enum import Enum
from io import BytesIO
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont

from ledger_reports.common.exceptions import ResourceLoadError
from ledger_reports.common.logging_config import get_logger
from ledger_reports.common.settings import get_settings

logger = get_logger(__name__)

PRIMARY_FONT = 'NotoSansJP'
SECONDARY_FONT = 'NotoSansSC'

FONT_FILES = {
    PRIMARY_FONT: 'NotoSansJP-Regular.ttf',
    SECONDARY_FONT: 'NotoSansSC-Regular.ttf',
}

FontFetcher = Callable[[str], Awaitable[bytes]]


class LoaderState(Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"


@dataclass(frozen=True)
class FontBundle:
    """The two resolved font files, registered with reportlab under their names."""
    primary: bytes
    secondary: bytes
    primary_name: str = PRIMARY_FONT
    secondary_name: str = SECONDARY_FONT


def directory_fetcher(font_dir: Union[str, Path]) -> FontFetcher:
    """Fetcher reading font files from a local directory."""
    base = Path(font_dir)

    async def fetch(filename: str) -> bytes:
        return await asyncio.to_thread((base / filename).read_bytes)

    return fetch


def register_fonts(bundle: FontBundle) -> None:
    """Register both fonts with reportlab. Both are parsed before either is registered."""
    try:
        primary = TTFont(bundle.primary_name, BytesIO(bundle.primary))
        secondary = TTFont(bundle.secondary_name, BytesIO(bundle.secondary))
    except TTFError as e:
        raise ResourceLoadError("Invalid font data", reason=str(e)) from e
    pdfmetrics.registerFont(primary)
    pdfmetrics.registerFont(secondary)


class FontLoader:
    """
    Lazily-initialized, process-wide font cache.

    Usage:
        fonts = await get_font_loader().load()
    """

    def __init__(self, fetcher: Optional[FontFetcher] = None,
                 primary_name: str = PRIMARY_FONT, secondary_name: str = SECONDARY_FONT):
        self._fetcher = fetcher
        self.primary_name = primary_name
        self.secondary_name = secondary_name
        self._state = LoaderState.UNLOADED
        self._pending: Optional[asyncio.Task] = None
        self._fonts: Optional[FontBundle] = None

    @property
    def state(self) -> LoaderState:
        return self._state

    async def load(self) -> FontBundle:
        """
        Return the font bundle, fetching it on first use.

        Raises:
            ResourceLoadError: if either font cannot be fetched or parsed
        """
        if self._state is LoaderState.LOADED:
            return self._fonts

        if self._state is LoaderState.UNLOADED:
            self._pending = asyncio.ensure_future(self._resolve())
            self._state = LoaderState.LOADING
            logger.info("Font fetch started", fonts=[self.primary_name, self.secondary_name])

        # a cancelled caller must not cancel the shared fetch
        return await asyncio.shield(self._pending)

    async def _resolve(self) -> FontBundle:
        try:
            primary, secondary = await asyncio.gather(
                self._fetch(FONT_FILES.get(self.primary_name, f"{self.primary_name}.ttf")),
                self._fetch(FONT_FILES.get(self.secondary_name, f"{self.secondary_name}.ttf")),
            )
            bundle = FontBundle(
                primary=primary,
                secondary=secondary,
                primary_name=self.primary_name,
                secondary_name=self.secondary_name,
            )
            register_fonts(bundle)
        except BaseException as e:
            self._state = LoaderState.UNLOADED
            self._pending = None
            logger.error(f"Font load failed: {e}", error_type=type(e).__name__)
            raise

        self._fonts = bundle
        self._state = LoaderState.LOADED
        self._pending = None
        logger.info("Fonts loaded", primary_bytes=len(primary), secondary_bytes=len(secondary))
        return bundle

    async def _fetch(self, filename: str) -> bytes:
        fetcher = self._fetcher or directory_fetcher(get_settings().font_dir)
        try:
            data = await fetcher(filename)
        except ResourceLoadError:
            raise
        except Exception as e:
            raise ResourceLoadError("Font fetch failed", resource=filename, reason=str(e)) from e
        if not data:
            raise ResourceLoadError("Font fetch failed", resource=filename, reason="empty response")
        return data


# Global instance
_font_loader: Optional[FontLoader] = None


def get_font_loader() -> FontLoader:
    """Get the process-wide FontLoader."""
    global _font_loader
    if _font_loader is None:
        _font_loader = FontLoader()
    return _font_loader
