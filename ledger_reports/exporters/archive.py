"""
Archive bundler: packs already-rendered documents into one ZIP.
"""
import asyncio
import zipfile
from io import BytesIO
from typing import Sequence

from ledger_reports.common.exceptions import ArchiveBundleError
from ledger_reports.common.logging_config import get_logger
from ledger_reports.common.models import ReportDocument, ZIP_MEDIA_TYPE

logger = get_logger(__name__)


async def bundle_many(documents: Sequence[ReportDocument]) -> bytes:
    """
    Write each document into a deflate-compressed ZIP, in order, names unchanged.

    Yields to the event loop between entries so a large bundle does not
    block other work.

    Raises:
        ArchiveBundleError: on a duplicate entry name or any compression failure;
            no partial archive is returned
    """
    seen = set()
    buffer = BytesIO()
    current = None
    try:
        with zipfile.ZipFile(buffer, 'w', compression=zipfile.ZIP_DEFLATED) as archive:
            for document in documents:
                current = document.filename
                if current in seen:
                    raise ArchiveBundleError("Duplicate archive entry", entry=current)
                seen.add(current)
                archive.writestr(current, document.content)
                await asyncio.sleep(0)
    except ArchiveBundleError:
        raise
    except (OSError, ValueError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        logger.error(f"Archive bundling failed: {e}", entry=current)
        raise ArchiveBundleError("Archive bundling failed", entry=current, reason=str(e)) from e

    logger.info("Archive bundled", entries=len(seen))
    return buffer.getvalue()


async def bundle_documents(documents: Sequence[ReportDocument], filename: str) -> ReportDocument:
    """Bundle documents into a ZIP ReportDocument."""
    content = await bundle_many(documents)
    return ReportDocument(filename=filename, content=content, media_type=ZIP_MEDIA_TYPE)
