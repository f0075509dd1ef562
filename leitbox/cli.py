"""
leitbox: command line interface.

Commands:
- leitbox intervals  - Show the Leitner interval table
- leitbox settings   - Show active settings
- leitbox demo       - Run a scripted session on a sample lesson
"""
from __future__ import annotations

import sys
from datetime import datetime

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from .config import get_settings
from .core.card import Card
from .core.category import Category
from .core.clock import FixedClock
from .core.intervals import LeitnerIntervals
from .core.lesson import Lesson
from .study.session import LearnSession, fire_expirations

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="leitbox",
    help="leitbox: Leitner box scheduling engine",
    no_args_is_help=True,
)
console = Console()

SAMPLE_CARDS = {
    "Spanish/Verbs": [("hablar", "to speak"), ("comer", "to eat"), ("vivir", "to live")],
    "Spanish/Nouns": [("la casa", "the house"), ("el perro", "the dog")],
    "Capitals": [("France", "Paris"), ("Japan", "Tokyo"), ("Kenya", "Nairobi")],
}


def build_sample_lesson(clock: FixedClock) -> Lesson:
    """Small lesson with nested categories, used by the demo command."""
    lesson = Lesson()
    for path, pairs in SAMPLE_CARDS.items():
        category = lesson.root
        for name in path.split("/"):
            category = category.get_child(name) or category.add_child(Category(name))
        for front, back in pairs:
            category.add_card(Card(front, back, clock=clock), clock=clock)
            clock.advance(minutes=1)
    return lesson


def render_decks(root: Category) -> Table:
    """Cards per level for every category of the tree."""
    table = Table(title="Decks")
    table.add_column("Category")
    for level in range(root.deck_count):
        table.add_column(f"L{level}", justify="right")

    for category in root.walk():
        counts = [str(len(category.get_cards(level))) for level in range(root.deck_count)]
        table.add_row("  " * category.depth + category.name, *counts)

    return table


# =============================================================================
# Commands
# =============================================================================

@app.command()
def intervals(
    levels: int = typer.Option(
        0,
        "--levels", "-l",
        help="Number of levels to show (default: whole table)",
    ),
) -> None:
    """Show how long a card stays learned at each level."""
    policy = LeitnerIntervals.from_settings()

    table = Table(title="Leitner Intervals")
    table.add_column("Level", justify="right")
    table.add_column("Days", justify="right", style="bold")

    for level, days in policy.table(levels or None):
        table.add_row(str(level), str(days))

    console.print(table)


@app.command()
def settings() -> None:
    """Show active settings (environment variables prefixed with LEITBOX_)."""
    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="dim")
    table.add_column("Value", style="bold")

    for name, value in get_settings().model_dump().items():
        table.add_row(name, str(value))

    console.print(table)


@app.command()
def demo(
    days: int = typer.Option(
        3,
        "--days", "-d",
        help="Days to advance the clock after the session",
    ),
) -> None:
    """
    Run a scripted session on a sample lesson.

    Every third answer fails, the others pass. Afterwards the clock moves
    forward and the cards that became due again are listed.
    """
    clock = FixedClock(datetime(2024, 1, 1, 9, 0))
    lesson = build_sample_lesson(clock)

    session = LearnSession(lesson.root, clock=clock)
    queue = session.start()
    for i, card in enumerate(queue):
        if i % 3 == 2:
            session.record_fail(card)
        else:
            session.record_pass(card)
    stats = session.end()

    console.print(
        f"\n[bold cyan]Session[/bold cyan]: {stats.passed} passed, {stats.failed} failed "
        f"({stats.accuracy * 100:.0f}%)"
    )
    console.print(render_decks(lesson.root))

    since = clock.now()
    clock.advance(days=days)
    expired = fire_expirations(lesson.root, since, clock)

    console.print(f"\nAfter {days} days: {len(expired)} cards expired, "
                  f"{len(lesson.root.get_learnable_cards(clock=clock))} learnable")
    for card in expired:
        console.print(f"  [yellow]due[/yellow] {card.front.text} ({card.category.path})")


# =============================================================================
# Entry Point
# =============================================================================

def configure_logging() -> None:
    current = get_settings()

    logger.remove()
    logger.add(
        sys.stderr,
        level=current.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if current.log_file:
        logger.add(current.log_file, level=current.log_level, rotation="10 MB")


def main() -> None:
    """CLI entry point."""
    configure_logging()
    app()


if __name__ == "__main__":
    main()
