"""
Locator IQ - CLI Entry Point.

Configuration Priority:
    1. CLI arguments (--patterns, --code, etc.)
    2. Config file (--config, or locator-iq.yaml)
    3. Environment variables (LOCATOR_IQ__RESOLVER__PATTERNS_PATH, etc.)

Usage:
    locator-iq resolve --patterns resources/patterns --code searchPage --type button --page SearchPage --field PROCEED
    locator-iq patterns --patterns resources/patterns
    locator-iq locate https://example.com --code searchPage --type link --page Home --field "More information..."
"""

import asyncio
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from locator_iq.browsers.playwright_document import PlaywrightDocument
from locator_iq.config import Settings, load_config
from locator_iq.core.keys import FieldType
from locator_iq.core.resolver import Resolution
from locator_iq.core.service import LocatorService
from locator_iq.exceptions import LocatorIQError, NoElementMatchedError
from locator_iq.utils.logging import setup_logging_from_settings

app = typer.Typer(
    name="locator-iq",
    help="Pattern-based element locators for UI test automation",
    add_completion=False,
)

console = Console()


def _load_settings(
    config: Optional[str],
    patterns: Optional[str],
    static: Optional[str],
    code: Optional[str],
) -> Settings:
    """Load settings and apply CLI overrides."""
    resolver: Dict[str, Any] = {}
    if patterns:
        resolver["patterns_path"] = patterns
    if static:
        resolver["static_locators_path"] = static
    if code:
        resolver["default_pattern_code"] = code
    overrides = {"resolver": resolver} if resolver else {}
    return load_config(config_path=config, **overrides)


def _fail(error: LocatorIQError) -> None:
    console.print(f"[red]Error:[/red] {escape(error.message)}")
    if isinstance(error, NoElementMatchedError):
        for i, candidate in enumerate(error.candidates, 1):
            console.print(f"  [dim]{i}.[/dim] {escape(candidate)}")
    raise typer.Exit(1)


def _print_resolution(resolution: Resolution) -> None:
    console.print(Panel.fit(
        f"[bold blue]{escape(resolution.record.description or resolution.field_name)}[/bold blue]\n"
        f"[dim]Key:[/dim] {resolution.key}\n"
        f"[dim]Source:[/dim] {resolution.source.value}",
        border_style="blue",
    ))
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Candidate")
    for i, candidate in enumerate(resolution.candidates, 1):
        table.add_row(str(i), escape(candidate))
    if resolution.candidates:
        console.print(table)
    else:
        console.print("[yellow]No candidates generated.[/yellow]")


@app.command()
def resolve(
    field: str = typer.Option(..., "--field", "-f", help="Field name, e.g. 'PROCEED' or '{Login Form} Username[2]'"),
    field_type: str = typer.Option("button", "--type", "-t", help="Field type: " + ", ".join(m.value for m in FieldType)),
    page: str = typer.Option("", "--page", "-p", help="Page name"),
    value: Optional[str] = typer.Option(None, "--value", help="Field value for radio/select/checkbox"),
    code: Optional[str] = typer.Option(None, "--code", "-c", help="Page object pattern code"),
    patterns: Optional[str] = typer.Option(None, "--patterns", help="Pattern file or directory"),
    static: Optional[str] = typer.Option(None, "--static", help="Static locator file"),
    config: Optional[str] = typer.Option(None, "--config", help="Config file"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Resolve a field to its cache key and candidate selectors.

    No browser is started; this shows what the matcher would try.
    """
    try:
        settings = _load_settings(config, patterns, static, code)
        setup_logging_from_settings(settings.logging, verbose)
        service = LocatorService.from_settings(settings)
        resolution = service.resolve(field_type, page, field, value)
    except LocatorIQError as e:
        _fail(e)
        return
    _print_resolution(resolution)


@app.command("patterns")
def list_patterns(
    patterns: Optional[str] = typer.Option(None, "--patterns", help="Pattern file or directory"),
    config: Optional[str] = typer.Option(None, "--config", help="Config file"),
):
    """
    List loaded page objects and the field types they configure.
    """
    try:
        settings = _load_settings(config, patterns, None, None)
        service = LocatorService.from_settings(settings)
    except LocatorIQError as e:
        _fail(e)
        return

    table_data = service.resolver.patterns
    if not len(table_data):
        console.print("[yellow]No page objects loaded.[/yellow]")
        return

    table = Table(title="Page objects", show_header=True, header_style="bold")
    table.add_column("Pattern code")
    table.add_column("Field types")
    table.add_column("Sections", justify="right")
    table.add_column("Locations", justify="right")
    for code in table_data.codes():
        page_object = table_data.page(code)
        table.add_row(
            code,
            ", ".join(f"{ft.value} ({len(t)})" for ft, t in page_object.fields.items()),
            str(len(page_object.sections)),
            str(len(page_object.locations)),
        )
    console.print(table)


@app.command()
def locate(
    url: str = typer.Argument(..., help="Page URL to open"),
    field: str = typer.Option(..., "--field", "-f", help="Field name"),
    field_type: str = typer.Option("button", "--type", "-t", help="Field type"),
    page: str = typer.Option("", "--page", "-p", help="Page name"),
    value: Optional[str] = typer.Option(None, "--value", help="Field value for radio/select/checkbox"),
    code: Optional[str] = typer.Option(None, "--code", "-c", help="Page object pattern code"),
    patterns: Optional[str] = typer.Option(None, "--patterns", help="Pattern file or directory"),
    static: Optional[str] = typer.Option(None, "--static", help="Static locator file"),
    config: Optional[str] = typer.Option(None, "--config", help="Config file"),
    visible: bool = typer.Option(False, "--visible", "-v", help="Run with visible browser"),
    timeout: int = typer.Option(30, "--timeout", help="Max seconds to look for the element"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Open a page in a browser and report which candidate matches.
    """
    try:
        settings = _load_settings(config, patterns, static, code)
        setup_logging_from_settings(settings.logging, verbose)
        service = LocatorService.from_settings(settings)
    except LocatorIQError as e:
        _fail(e)
        return

    try:
        asyncio.run(_locate_async(service, url, field_type, page, field, value, not visible, timeout))
    except LocatorIQError as e:
        _fail(e)
    finally:
        service.save_cache()


async def _locate_async(
    service: LocatorService,
    url: str,
    field_type: str,
    page_name: str,
    field: str,
    value: Optional[str],
    headless: bool,
    timeout: int,
) -> None:
    from playwright.async_api import async_playwright

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=headless)
        try:
            page = await browser.new_page()
            await page.goto(url)
            document = PlaywrightDocument(page)
            resolution = service.resolve(field_type, page_name, field, value, url=document.url)
            _print_resolution(resolution)
            matched = await service.locate(
                document, field_type, page_name, field, value,
                timeout_ms=timeout * 1000,
            )
            console.print(
                f"[green]✓ Matched candidate {matched.index + 1}:[/green] {escape(matched.selector)}"
            )
        finally:
            await browser.close()


if __name__ == "__main__":
    app()
