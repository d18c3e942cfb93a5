"""
Command-line entry points: run the server, or chat with the bot in a terminal.
"""

from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table
from rich.text import Text

from explorabot.config import settings
from explorabot.services.intent_service import IntentResponder
from explorabot.services.session_service import build_responder

app = typer.Typer(
    name="explorabot",
    help=f"🤖 {settings.APP_NAME} - zero-code assistant chatbot",
    no_args_is_help=True,
)

console = Console()
EXIT_COMMANDS = {"exit", "quit", "/exit", "/quit", ":q"}


def _print_bot(response: str, markdown: bool = True) -> None:
    console.print(f"[cyan]🤖 {settings.APP_NAME}[/cyan]")
    console.print(Markdown(response) if markdown else Text(response))
    console.print()


def _print_history(responder: IntentResponder) -> None:
    turns = responder.get_history()
    if not turns:
        console.print("[dim]No conversation yet.[/dim]")
        return
    table = Table(title="History")
    table.add_column("Time", style="dim")
    table.add_column("Role")
    table.add_column("Intent", style="cyan")
    table.add_column("Content")
    for turn in turns:
        content = turn.content if len(turn.content) <= 60 else turn.content[:57] + "..."
        table.add_row(turn.timestamp.strftime("%H:%M:%S"), turn.role, turn.intent or "", Text(content))
    console.print(table)


def _chat_loop(responder: IntentResponder, markdown: bool) -> None:
    _print_bot(responder.welcome, markdown=markdown)
    console.print("[dim]Commands: /history, /clear, /quit[/dim]\n")

    while True:
        try:
            text = typer.prompt("You", default="", show_default=False)
        except (EOFError, typer.Abort):
            break

        command = text.strip().lower()
        if command in EXIT_COMMANDS:
            break
        if command == "/history":
            _print_history(responder)
            continue
        if command == "/clear":
            responder.clear_context()
            console.print("[green]✓[/green] Conversation cleared\n")
            continue
        if not command:
            continue

        _print_bot(responder.process(text), markdown=markdown)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address"),
    port: Optional[int] = typer.Option(None, help="Bind port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the HTTP / WebSocket server."""
    from explorabot.main import run

    run(host=host, port=port, reload=reload)


@app.command()
def ask(
    message: str = typer.Argument(..., help="Message to send"),
    plain: bool = typer.Option(False, "--plain", help="Print raw markup instead of rendering it"),
):
    """Send one message and print the reply."""
    responder = build_responder()
    _print_bot(responder.process(message), markdown=not plain)


@app.command()
def chat(
    plain: bool = typer.Option(False, "--plain", help="Print raw markup instead of rendering it"),
):
    """Interactive terminal conversation."""
    # engine debug logs would interleave with the conversation
    logger.disable("explorabot")
    try:
        _chat_loop(build_responder(), markdown=not plain)
    finally:
        logger.enable("explorabot")
    console.print("👋 Goodbye!")


if __name__ == "__main__":
    app()
