"""PDF page-by-page text extraction with a per-page deadline.

Opens the uploaded bytes with PyMuPDF (fitz) and pulls plain text from
each page in order.  Every ``page.get_text()`` call runs on its own daemon
thread raced by ``asyncio.wait_for``; a page that blows the deadline is
skipped and extraction moves on to the next page.

A timed-out thread cannot be cancelled.  It runs to completion in the
background and its result is discarded.  These threads live outside the
event loop's default executor, so any number of hung pages leaves later
pages (and interpreter shutdown) unaffected.  PyMuPDF documents are not
thread-safe: the handle a hung thread is using is abandoned to the garbage
collector and the remaining pages are read from a freshly opened handle.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable
from typing import Any

import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import structlog

from vectordocs.models.document import ExtractionResult, Page, UploadedDocument
from vectordocs.utils.errors import DocumentOpenError, PageTimeoutError

logger = structlog.get_logger(logger_name=__name__)

# Called with a human-readable progress message; may be sync or async.
ProgressCallback = Callable[[str], Any]

# Documents shorter than this report every page; longer ones are throttled.
_REPORT_EVERY_PAGE_BELOW = 20
_REPORT_INTERVAL = 5


def should_report_page(index: int, total: int) -> bool:
    """Return ``True`` if page *index* (1-based) of *total* gets a progress line."""
    return (
        total < _REPORT_EVERY_PAGE_BELOW
        or index % _REPORT_INTERVAL == 0
        or index == 1
        or index == total
    )


class PageExtractor:
    """Extracts plain text from PDF bytes, one bounded page at a time.

    Parameters
    ----------
    page_timeout:
        Seconds allowed for a single page's text extraction.
    """

    def __init__(self, page_timeout: float = 10.0) -> None:
        self._page_timeout = page_timeout

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def extract(
        self,
        document: UploadedDocument,
        on_progress: ProgressCallback | None = None,
    ) -> ExtractionResult:
        """Extract the text of every page of *document*.

        Parameters
        ----------
        document:
            The uploaded PDF.
        on_progress:
            Optional callback receiving "Reading PDF page i/n" and
            "Skipped page i (timeout)" messages.

        Returns
        -------
        ExtractionResult
            Page texts joined with newlines, in page order, plus counts of
            total, extracted and skipped pages.

        Raises
        ------
        DocumentOpenError
            If the bytes cannot be opened as a PDF.
        """
        doc = await self._open(document)
        total = len(doc)
        pages: list[Page] = []
        skipped = 0
        # None once the current handle is owned by a hung worker thread.
        current: fitz.Document | None = doc

        try:
            for number in range(1, total + 1):
                if should_report_page(number, total):
                    await _notify(on_progress, f"Reading PDF page {number}/{total}")

                if current is None:
                    current = await self._open(document)
                    logger.debug("pdf_reopened", filename=document.filename, page=number)

                try:
                    page = await self._extract_page(current, number)
                except PageTimeoutError as exc:
                    current = None
                    skipped += 1
                    logger.warning(
                        "pdf_page_timeout",
                        filename=document.filename,
                        page=exc.page,
                        timeout=self._page_timeout,
                    )
                    await _notify(on_progress, f"Skipped page {exc.page} (timeout)")
                    continue

                if page is None:
                    skipped += 1
                    continue
                pages.append(page)
        finally:
            if current is not None:
                current.close()

        text = "\n".join(page.text for page in pages)
        logger.info(
            "pdf_extracted",
            filename=document.filename,
            total_pages=total,
            pages_extracted=len(pages),
            pages_skipped=skipped,
            characters=len(text),
        )
        return ExtractionResult(
            text=text,
            total_pages=total,
            pages_extracted=len(pages),
            pages_skipped=skipped,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    async def _open(document: UploadedDocument) -> fitz.Document:
        try:
            return await _run_on_daemon_thread(fitz.open, stream=document.content, filetype="pdf")
        except Exception as exc:  # noqa: BLE001
            logger.error("pdf_open_failed", filename=document.filename, error=str(exc))
            raise DocumentOpenError(message=f"failed to read PDF: {exc}") from exc

    async def _extract_page(self, doc: fitz.Document, number: int) -> Page | None:
        """Return the text of page *number*, or ``None`` if it cannot be read.

        Raises :class:`PageTimeoutError` if ``get_text`` exceeds the deadline.
        """
        try:
            page = doc.load_page(number - 1)
        except Exception as exc:  # noqa: BLE001
            logger.warning("pdf_page_unreadable", page=number, error=str(exc))
            return None
        if page is None:
            return None

        try:
            text = await asyncio.wait_for(
                _run_on_daemon_thread(page.get_text, "text"),
                timeout=self._page_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise PageTimeoutError(
                message=f"page {number} exceeded {self._page_timeout}s",
                page=number,
            ) from exc
        except Exception as exc:  # noqa: BLE001
            logger.warning("pdf_page_extract_failed", page=number, error=str(exc))
            return None

        return Page(index=number, text=text or "")


async def _notify(callback: ProgressCallback | None, message: str) -> None:
    if callback is None:
        return
    result = callback(message)
    if asyncio.iscoroutine(result):
        await result


def _run_on_daemon_thread(
    func: Callable[..., Any], *args: Any, **kwargs: Any
) -> asyncio.Future:
    """Run ``func(*args, **kwargs)`` on a fresh daemon thread.

    The returned future is completed from the thread.  A result that arrives
    after the future was cancelled, or after the loop closed, is dropped.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future = loop.create_future()

    def _settle(result: Any, error: BaseException | None) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)

    def _target() -> None:
        try:
            outcome: tuple[Any, BaseException | None] = (func(*args, **kwargs), None)
        except Exception as exc:  # noqa: BLE001
            outcome = (None, exc)
        try:
            loop.call_soon_threadsafe(_settle, *outcome)
        except RuntimeError:
            # Loop already closed; nobody is waiting for this page.
            logger.debug("pdf_worker_result_dropped", func=getattr(func, "__name__", repr(func)))

    threading.Thread(target=_target, name="pdf-page-worker", daemon=True).start()
    return future
