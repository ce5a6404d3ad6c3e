"""Inline comment command: group review comments by document."""

import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from almanac.config import load_settings
from almanac.domain.comments import Comment, StrayPolicy, display_order, group_and_order
from almanac.errors import AlmanacError
from almanac.sources import load_comments, load_documents

console = Console()
logger = logging.getLogger(__name__)


def format_anchor(comment: Comment) -> str:
    """Line anchor such as "12" or "12-15", prefixed with the file side."""
    side = "new" if comment.is_new_file else "old"
    if comment.line_length:
        return f"{side}:{comment.line_number}-{comment.last_line}"
    return f"{side}:{comment.line_number}"


def inlines_command(
    comments_file: str,
    documents_file: str,
    strays: str | None = None,
) -> None:
    """Show inline comments grouped by document and ordered by line."""
    try:
        settings = load_settings()
        policy = StrayPolicy(strays.lower()) if strays else settings.stray_comments

        documents = load_documents(Path(documents_file))
        comments = load_comments(Path(comments_file))
        groups = group_and_order(comments, display_order(documents), policy)

        shown = sum(len(group) for group in groups.values())
        if shown < len(comments):
            logger.warning("Dropped %d comments on unknown documents", len(comments) - shown)

        if not groups:
            console.print("[yellow]No inline comments found[/yellow]")
            return

        for doc_id, group in groups.items():
            table = Table(title=f"{documents[doc_id]} [dim](#{doc_id})[/dim]", title_justify="left")
            table.add_column("Line", style="cyan", justify="right")
            table.add_column("ID", style="dim", justify="right")
            table.add_column("Reply to", style="dim", justify="right")
            table.add_column("Comment")

            for comment in group:
                reply_to = str(comment.reply_to_id) if comment.reply_to_id is not None else "-"
                table.add_row(format_anchor(comment), str(comment.id), reply_to, comment.content)

            console.print(table)

    except (AlmanacError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Could not read input: {e}[/red]", style="bold")
        sys.exit(1)
