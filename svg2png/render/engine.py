"""Playwright-backed render engine and page adapter."""
from __future__ import annotations

import base64
import logging
from typing import Any, Mapping, Optional, Protocol, runtime_checkable

from playwright.async_api import Browser, ConsoleMessage, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from .. import logging_manager as log_mgr
from ..config.loader import ConversionConfig
from ..errors import RenderError, SetupError
from .context import LOAD_SUCCESS, EvalFailed, EvalResult, RenderContext, eval_result_from_payload
from .scripts import HAS_PARSE_ERROR

LOAD_FAILED = "fail"
LOAD_PARSE_ERROR = "parse-error"


@runtime_checkable
class RenderEngine(Protocol):
    """A running engine able to host several independent render contexts."""

    async def start(self) -> Any:
        ...

    async def new_context(self) -> RenderContext:
        ...

    async def close(self) -> None:
        ...


class PlaywrightRenderContext:
    """Expose one Playwright page through the :class:`RenderContext` protocol."""

    def __init__(
        self,
        page: Page,
        *,
        transparent_background: bool = True,
        logger: Optional[logging.Logger] = None,
        debug: bool = False,
    ) -> None:
        self._page = page
        self._transparent_background = transparent_background
        self._logger = logger or log_mgr.get_logger()
        if debug:
            page.on("console", self._forward_console)

    @property
    def page(self) -> Page:
        return self._page

    def _forward_console(self, message: ConsoleMessage) -> None:
        self._logger.debug(
            message.text,
            extra={"event": "render.console", "console_type": message.type},
        )

    async def open(self, content: str) -> str:
        try:
            response = await self._page.goto(content, wait_until="load")
        except PlaywrightError as exc:
            self._logger.debug(
                "Document failed to load",
                extra={"event": "render.load_error", "error": str(exc)},
            )
            return LOAD_FAILED
        if response is not None and not response.ok:
            return LOAD_FAILED
        try:
            if await self._page.evaluate(HAS_PARSE_ERROR):
                return LOAD_PARSE_ERROR
        except PlaywrightError:
            return LOAD_FAILED
        return LOAD_SUCCESS

    async def evaluate(self, script: str, arg: Any = None) -> EvalResult:
        try:
            payload = await self._page.evaluate(script, arg)
        except PlaywrightError as exc:
            return EvalFailed(str(exc))
        return eval_result_from_payload(payload)

    async def get_viewport_size(self) -> Optional[Mapping[str, int]]:
        return self._page.viewport_size

    async def set_viewport_size(self, size: Mapping[str, int]) -> None:
        await self._page.set_viewport_size({"width": int(size["width"]), "height": int(size["height"])})

    async def export(self, raster_format: str) -> str:
        options: dict[str, Any] = {"type": raster_format}
        if raster_format == "png":
            options["omit_background"] = self._transparent_background
        image = await self._page.screenshot(**options)
        return base64.b64encode(image).decode("ascii")

    async def dispose(self) -> None:
        if not self._page.is_closed():
            await self._page.close()


class PlaywrightRenderEngine:
    """Own a single browser instance shared by every render slot of a batch."""

    def __init__(self, config: ConversionConfig, *, logger: Optional[logging.Logger] = None) -> None:
        self.config = config
        self._logger = logger or log_mgr.get_logger()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    @property
    def running(self) -> bool:
        return self._browser is not None

    async def start(self) -> "PlaywrightRenderEngine":
        if self._browser is not None:
            return self
        try:
            self._playwright = await async_playwright().start()
            browser_type = getattr(self._playwright, self.config.browser)
            self._browser = await browser_type.launch(headless=self.config.headless)
        except Exception as exc:
            await self.close()
            raise SetupError(f"Unable to launch {self.config.browser}: {exc}") from exc
        self._logger.debug(
            "Render engine started",
            extra={"event": "engine.start", "browser": self.config.browser},
        )
        return self

    async def new_context(self) -> PlaywrightRenderContext:
        if self._browser is None:
            raise RenderError("Render engine has not been started")
        width, height = self.config.default_viewport
        try:
            page = await self._browser.new_page(viewport={"width": width, "height": height})
        except PlaywrightError as exc:
            raise RenderError(f"Unable to open a render context: {exc}") from exc
        page.set_default_timeout(self.config.navigation_timeout_ms)
        return PlaywrightRenderContext(
            page,
            transparent_background=self.config.transparent_background,
            logger=self._logger,
            debug=self.config.debug,
        )

    async def close(self) -> None:
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None
        try:
            if browser is not None:
                self._logger.debug("Closing render engine", extra={"event": "engine.close"})
                await browser.close()
        finally:
            if playwright is not None:
                await playwright.stop()

    async def __aenter__(self) -> "PlaywrightRenderEngine":
        return await self.start()

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


__all__ = [
    "LOAD_FAILED",
    "LOAD_PARSE_ERROR",
    "PlaywrightRenderContext",
    "PlaywrightRenderEngine",
    "RenderEngine",
]
