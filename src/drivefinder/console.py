# Console front end: a terminal SearchView plus the interactive/one-shot runners.
# Created: 2026-10-19

from __future__ import annotations

import asyncio
import secrets
import urllib.parse
from collections.abc import Awaitable, Callable

from rich.console import Console
from rich.filesize import decimal
from rich.markup import escape
from rich.style import Style
from rich.text import Text

from drivefinder.config import Settings
from drivefinder.integrations.oauth import GRAPH_SERVICE, OAuthManager
from drivefinder.search.classifier import IconAsset, icon_for
from drivefinder.search.controller import SearchSessionController
from drivefinder.search.models import RenderedItem, SearchOutcome

LineReader = Callable[[str], Awaitable[str]]

QUIT_COMMANDS = frozenset({":q", "quit", "exit"})

GLYPHS: dict[IconAsset, str] = {
    IconAsset.PLACEHOLDER: "⏳",
    IconAsset.FILE: "📄",
    IconAsset.FOLDER: "📁",
    IconAsset.IMAGE: "🖼 ",
}


async def read_stdin_line(prompt: str) -> str:
    """Read a line without blocking the event loop. Raises EOFError at end of input."""
    return await asyncio.to_thread(input, prompt)


class ConsoleSearchView:
    """SearchView that prints to a Rich console.

    A terminal cannot take lines back, so removed items are only dropped from
    ``visible``; a rule marks where a new batch starts.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self.control_label = ""
        self.visible: list[RenderedItem] = []

    def set_control_label(self, label: str) -> None:
        self.control_label = label

    def add_item(self, item: RenderedItem) -> None:
        if not self.visible:
            self.console.rule(style="dim")
        self.visible.append(item)
        glyph = GLYPHS[icon_for(item.icon_kind)]
        line = Text(f"{glyph} {item.label}")
        if item.size is not None:
            line.append(f"  {decimal(item.size)}", style="dim")
        if item.web_url:
            line.append(f"  {item.web_url}", style=Style(dim=True, link=item.web_url))
        self.console.print(line, emoji=False, highlight=False)

    def remove_item(self, item: RenderedItem) -> None:
        self.visible.remove(item)

    def show_error(self, message: str) -> None:
        self.console.print(message, style="bold red", markup=False, emoji=False)


async def run_interactive(
    controller: SearchSessionController,
    console: Console,
    read_line: LineReader = read_stdin_line,
) -> int:
    """Prompt loop: each entered line presses the search/cancel control."""
    console.print(
        "Type a query and press Enter to search. "
        "Press Enter again while a search runs to cancel it. [bold]:q[/bold] quits."
    )
    while True:
        try:
            line = await read_line(f"[{controller.label}] > ")
        except EOFError:
            break
        if line.strip() in QUIT_COMMANDS:
            break
        controller.activate(line)

    await controller.shutdown()
    return 0


async def run_search(controller: SearchSessionController, query: str, console: Console) -> int:
    """Run a single search session and print a summary line."""
    task = controller.activate(query)
    if task is None:
        console.print("Nothing to search for.")
        return 2

    report = await task
    if report.outcome is SearchOutcome.NO_RESULTS:
        console.print(f"No results for {escape(query)!r}.")
    elif report.outcome in (SearchOutcome.COMPLETED, SearchOutcome.CANCELLED):
        console.print(f"[dim]{report.rendered} of {report.received} result(s)[/dim]")
    elif report.outcome is SearchOutcome.DRIVE_UNAVAILABLE:
        console.print("[bold red]Your drive is not available.[/bold red]")
        return 1
    else:
        return 1
    return 0


def extract_auth_code(pasted: str, expected_state: str) -> str:
    """Accept either the bare code or the full redirect URL."""
    pasted = pasted.strip()
    if "://" not in pasted:
        return pasted

    params = urllib.parse.parse_qs(urllib.parse.urlparse(pasted).query)
    if "error" in params:
        description = params.get("error_description", params["error"])[0]
        raise ValueError(f"Authorization failed: {description}")
    if params.get("state", [""])[0] != expected_state:
        raise ValueError("Authorization state mismatch; start the login again.")
    codes = params.get("code")
    if not codes:
        raise ValueError("No authorization code in the pasted URL.")
    return codes[0]


async def run_login(
    settings: Settings,
    oauth: OAuthManager,
    console: Console,
    read_line: LineReader = read_stdin_line,
) -> int:
    """Authorization code flow: print the URL, read the code back, store tokens."""
    if not settings.graph_client_id:
        console.print(
            "[bold red]No client ID configured.[/bold red] "
            "Set DRIVEFINDER_GRAPH_CLIENT_ID or graph_client_id in config.json."
        )
        return 2

    state = secrets.token_urlsafe(16)
    url = oauth.get_auth_url(
        provider="microsoft",
        client_id=settings.graph_client_id,
        redirect_uri=settings.graph_redirect_uri,
        scopes=settings.graph_scopes,
        state=state,
    )
    console.print("Open this URL, sign in, then paste the redirect URL (or just the code):")
    console.print(url, soft_wrap=True, markup=False)

    try:
        code = extract_auth_code(await read_line("> "), state)
    except EOFError:
        return 1
    except ValueError as e:
        console.print(f"[bold red]{escape(str(e))}[/bold red]")
        return 1

    await oauth.exchange_code(
        provider="microsoft",
        service=GRAPH_SERVICE,
        code=code,
        client_id=settings.graph_client_id,
        client_secret=settings.graph_client_secret or "",
        redirect_uri=settings.graph_redirect_uri,
        scopes=settings.graph_scopes,
    )
    console.print("Signed in.")
    return 0


async def run_signout(oauth: OAuthManager, console: Console) -> int:
    if await oauth.sign_out(GRAPH_SERVICE):
        console.print("Signed out.")
    else:
        console.print("Not signed in.")
    return 0
