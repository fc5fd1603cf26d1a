"""Interactive choice of the page to import under."""

from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

from src.models import PageRef

ABORT_ANSWERS = ('', 'q', 'quit')


class PageSelector:
    """Asks the user to pick one of several pages matching the search.

    A blank answer or ``q`` aborts the selection.

    Example:
        >>> selector = PageSelector(console)
        >>> page = selector(pages)
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def __call__(self, pages: List[PageRef]) -> Optional[PageRef]:
        self.console.print("\n[bold]Several pages match. Select a page to import into:[/bold]")
        for index, page in enumerate(pages, start=1):
            self.console.print(f"  [cyan]{index}[/cyan]) {escape(page.title)}  [dim]{escape(page.page_id)}[/dim]")

        while True:
            answer = Prompt.ask(
                "Page number (blank or q to cancel)",
                console=self.console,
                default="",
                show_default=False,
            ).strip().lower()

            if answer in ABORT_ANSWERS:
                return None

            if answer.isdigit() and 1 <= int(answer) <= len(pages):
                return pages[int(answer) - 1]

            self.console.print(f"[red]Enter a number between 1 and {len(pages)}[/red]")
