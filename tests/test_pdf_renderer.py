from __future__ import annotations

from typing import Any

import pytest
from playwright.sync_api import Error as PlaywrightError

from allocation_report.core.config import Settings
from allocation_report.core.errors import ReportGenerationError
from allocation_report.services import pdf_renderer as pdf_renderer_module
from allocation_report.services.pdf_renderer import PDF_MARGIN, PlaywrightPdfRenderer


class _FakePage:
    def __init__(self, fail_on: str | None) -> None:
        self.fail_on = fail_on
        self.calls: list[str] = []

    def _call(self, name: str) -> None:
        self.calls.append(name)
        if name == self.fail_on:
            raise PlaywrightError(f"{name} failed")

    def set_default_timeout(self, timeout: float) -> None:
        self._call("set_default_timeout")

    def set_content(self, html: str, wait_until: str) -> None:
        self._call("set_content")

    def wait_for_function(self, expression: str, timeout: float) -> None:
        self._call("wait_for_function")

    def wait_for_timeout(self, timeout: float) -> None:
        self._call("wait_for_timeout")

    def pdf(self, **options: Any) -> bytes:
        self._call("pdf")
        self.pdf_options = options
        return b"%PDF-fake"


class _FakeBrowser:
    def __init__(self, page: _FakePage) -> None:
        self.page = page
        self.closed = False

    def new_page(self) -> _FakePage:
        return self.page

    def close(self) -> None:
        self.closed = True


class _FakePlaywright:
    def __init__(self, browser: _FakeBrowser) -> None:
        self.browser = browser
        self.chromium = self
        self.launch_options: dict[str, Any] = {}

    def launch(self, **options: Any) -> _FakeBrowser:
        self.launch_options = options
        return self.browser

    def __enter__(self) -> _FakePlaywright:
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None


def _install(monkeypatch: pytest.MonkeyPatch, fail_on: str | None = None) -> _FakePlaywright:
    fake = _FakePlaywright(_FakeBrowser(_FakePage(fail_on)))
    monkeypatch.setattr(pdf_renderer_module, "sync_playwright", lambda: fake)
    return fake


def test_render_prints_pdf_and_closes_browser(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = _install(monkeypatch)
    settings = Settings(pdf_render_timeout_ms=5000, pdf_settle_ms=0, chromium_args="--no-sandbox")

    result = PlaywrightPdfRenderer(settings).render("<html></html>")

    assert result == b"%PDF-fake"
    assert fake.browser.closed is True
    assert fake.launch_options["args"] == ["--no-sandbox"]
    assert fake.launch_options["timeout"] == 5000
    assert "wait_for_timeout" not in fake.browser.page.calls
    assert fake.browser.page.pdf_options == {"format": "A4", "print_background": True, "margin": PDF_MARGIN}


@pytest.mark.parametrize("fail_on", ["set_content", "wait_for_function", "pdf"])
def test_render_failure_is_reported_and_browser_released(monkeypatch: pytest.MonkeyPatch, fail_on: str) -> None:
    fake = _install(monkeypatch, fail_on=fail_on)

    with pytest.raises(ReportGenerationError):
        PlaywrightPdfRenderer(Settings()).render("<html></html>")

    assert fake.browser.closed is True
