"""
Example: Login Flow

Resolves fields on a login page from pattern files and interacts with
the matched elements through Playwright.
"""

import asyncio

from playwright.async_api import async_playwright

from locator_iq import LocatorService
from locator_iq.browsers import PlaywrightDocument
from locator_iq.config import load_config
from locator_iq.utils import setup_logging_from_settings


async def main():
    """Run the login flow example."""

    # Load configuration (from env vars, config files, or defaults)
    settings = load_config(config_path="examples/locator-iq.yaml")
    setup_logging_from_settings(settings.logging)
    service = LocatorService.from_settings(settings)

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=False)
        page = await browser.new_page()
        await page.goto("https://the-internet.herokuapp.com/login")
        document = PlaywrightDocument(page)

        username = await service.locate(document, "input", "LoginPage", "Username")
        await username.element.fill("tomsmith")

        password = await service.locate(document, "input", "LoginPage", "Password")
        await password.element.fill("SuperSecretPassword!")

        login = await service.locate(document, "button", "LoginPage", "{Login Form} Login")
        await login.element.click()

        print(f"Logged in with {login.selector}")
        await browser.close()

    service.save_cache()


if __name__ == "__main__":
    asyncio.run(main())
