"""Headless Chromium pages via Playwright."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from playwright.async_api import Page, async_playwright


@asynccontextmanager
async def browser_page(headless: bool = True) -> AsyncIterator[Page]:
    """Launch Chromium, yield a fresh page, and close both afterwards."""
    async with async_playwright() as pw:
        browser = await pw.chromium.launch(headless=headless)
        try:
            page = await browser.new_page()
            try:
                yield page
            finally:
                await page.close()
        finally:
            await browser.close()
