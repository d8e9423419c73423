"""Interactive CLI application."""
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from caas_journey.config import ConfigError, Settings, load_settings
from caas_journey.db import Store
from caas_journey.errors import JourneyError, UserNotFound
from caas_journey.leaderboard import compute_leaderboard
from caas_journey.models import CATEGORIES
from caas_journey.progress import get_progress
from caas_journey.reports import compare_pre_post
from caas_journey.scoring import ITEMS_PER_CATEGORY, MAX_RATING, category_info, display_percent
from caas_journey.stages import (
    STAGE_ORDER, get_latest_status_per_stage, next_stage, record_stage_completion,
    submit_caas_quiz,
)
from caas_journey.users import create_or_update_user, get_user

console = Console()

RATING_CHOICES = [str(r) for r in range(1, MAX_RATING + 1)]
EXIT_WORDS = ("q", "menu")


class SessionExitRequested(Exception):
    """User asked to leave a questionnaire before finishing it."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str]) -> int:
    while True:
        answer = session_prompt(f"{prompt} [{'/'.join(choices)}]")
        if answer.strip() in choices:
            return int(answer.strip())
        console.print("[red]Please pick one of the listed values.[/red]")


def show_welcome(user_id: str):
    console.print(Panel(
        f"[bold]Career Adaptability Journey[/bold]\n[dim]Concern → Control → Curiosity → Confidence[/dim]\n\nSigned in as [cyan]{user_id}[/cyan]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("register", "Create or update your profile"),
        ("quiz", "CAAS questionnaire (pre/post)"),
        ("stage", "Take a stage quiz"),
        ("status", "Latest result per stage"),
        ("progress", "Level progress"),
        ("leaderboard", "Posttest leaderboard"),
        ("compare", "Pretest vs posttest"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def ask_ratings(title: str) -> list[int]:
    console.print(f"\n[bold]{title}[/bold] [dim](1 = not at all, {MAX_RATING} = very strongly; 'q' to stop)[/dim]")
    return [
        session_int_prompt(f"  Item {i}/{ITEMS_PER_CATEGORY}", RATING_CHOICES)
        for i in range(1, ITEMS_PER_CATEGORY + 1)
    ]


def cmd_register(store: Store, user_id: str):
    username = Prompt.ask("Display name", default="")
    email = Prompt.ask("Email", default="")
    role = Prompt.ask("Role", choices=["student", "evaluator"], default="student")
    user = create_or_update_user(store, user_id, username=username, email=email, role=role)
    console.print(f"[green]Saved profile for {user.display_name or user.id}.[/green]")


def cmd_quiz(store: Store, user_id: str):
    kind = Prompt.ask("Questionnaire", choices=["pre", "post"], default="pre")
    answers = {name: ask_ratings(name.capitalize()) for name in CATEGORIES}
    result = submit_caas_quiz(store, user_id, answers, is_posttest=(kind == "post"))
    table = Table(title="CAAS Result")
    table.add_column("Category", style="cyan")
    table.add_column("Score", justify="right")
    for name in CATEGORIES:
        table.add_row(name.capitalize(), str(result["scores"][name]))
    table.add_row("[bold]Total[/bold]", f"[bold]{result['total']}[/bold]")
    console.print(table)
    info = category_info(result["category"])
    color = "green" if info["passed"] else "yellow"
    console.print(
        f"\n  {display_percent(result['percent'])}% • [{color}]{info['label']}[/{color}] • {info['action']}"
    )


def cmd_stage(store: Store, user_id: str, settings: Settings):
    stage = Prompt.ask("Stage", choices=list(STAGE_ORDER), default=STAGE_ORDER[0])
    answers = ask_ratings(f"{stage.capitalize()} stage")
    score = sum(answers)
    outcome = record_stage_completion(store, user_id, stage, answers, score, settings.stage_threshold)
    if outcome["passed"]:
        following = next_stage(stage)
        console.print(f"[green]Passed with {score}![/green]")
        if following:
            console.print(f"[cyan]Next stage unlocked: {following}[/cyan]")
        else:
            console.print("[cyan]Journey complete. Take the posttest with 'quiz'.[/cyan]")
    else:
        console.print(
            f"[red]Score {score}. At least {settings.stage_threshold:g} is needed to pass. Try again![/red]"
        )


def cmd_status(store: Store, user_id: str):
    latest = get_latest_status_per_stage(store, user_id)
    table = Table(title="Stage Status")
    table.add_column("Stage", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Result")
    table.add_column("When")
    for stage in STAGE_ORDER:
        status = latest.get(stage)
        if status is None:
            table.add_row(stage, "-", "[dim]not attempted[/dim]", "")
            continue
        result = "[green]Passed[/green]" if status.passed else "[red]Not yet[/red]"
        table.add_row(stage, f"{status.score:g}", result, status.created_at[:16])
    console.print(table)


def cmd_progress(store: Store, user_id: str):
    progress = get_progress(store, user_id)
    if not progress:
        console.print("[yellow]No progress recorded yet.[/yellow]")
        return
    table = Table(title="Level Progress")
    table.add_column("Level", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Completed")
    for p in progress:
        done = f"[green]{p.completed_at[:10]}[/green]" if p.completed else ""
        table.add_row(p.level_id, f"{p.score:g}", done)
    console.print(table)


def cmd_leaderboard(store: Store, settings: Settings):
    entries = compute_leaderboard(store, settings.leaderboard_limit)
    if not entries:
        console.print("[yellow]No posttest results yet.[/yellow]")
        return
    table = Table(title="Leaderboard")
    table.add_column("#", justify="right")
    table.add_column("Student", style="cyan")
    table.add_column("Total", justify="right")
    table.add_column("Percent", justify="right")
    for e in entries:
        table.add_row(str(e.rank), e.username, f"{e.total:g}", f"{display_percent(e.percent)}%")
    console.print(table)


def cmd_compare(store: Store, user_id: str):
    report = compare_pre_post(store, user_id)
    table = Table(title="Pretest vs Posttest")
    table.add_column("Category", style="cyan")
    table.add_column("Pre", justify="right")
    table.add_column("Post", justify="right")
    table.add_column("Change", justify="right")

    def fmt(value):
        return "-" if value is None else f"{value:g}"

    for row in report["categories"]:
        change = row["improvement"]
        color = "green" if change and change > 0 else "red" if change and change < 0 else "white"
        table.add_row(row["category"], fmt(row["pre"]), fmt(row["post"]), f"[{color}]{fmt(change)}[/{color}]")
    console.print(table)
    overall = report["overall"]
    if overall["improvement"] is not None:
        console.print(
            f"\n  Overall: {display_percent(overall['prePercent'])}% ({overall['preCategory']}) → "
            f"{display_percent(overall['postPercent'])}% ({overall['postCategory']})"
        )


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def main():
    try:
        settings = load_settings()
    except ConfigError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        sys.exit(2)
    setup_logging(settings.log_level)
    store = Store(settings.db_path).open()
    if not store.available:
        console.print(f"[red]Database unavailable: {store.reason}[/red]")
        sys.exit(1)

    user_id = Prompt.ask("User id").strip()
    try:
        get_user(store, user_id)
    except UserNotFound:
        console.print("[yellow]No profile yet. Let's create one.[/yellow]")
        cmd_register(store, user_id)

    show_welcome(user_id)

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="status").strip().lower()
        try:
            if choice == "register":
                cmd_register(store, user_id)
            elif choice == "quiz":
                cmd_quiz(store, user_id)
            elif choice == "stage":
                cmd_stage(store, user_id, settings)
            elif choice == "status":
                cmd_status(store, user_id)
            elif choice == "progress":
                cmd_progress(store, user_id)
            elif choice == "leaderboard":
                cmd_leaderboard(store, settings)
            elif choice == "compare":
                cmd_compare(store, user_id)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Keep exploring![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except SessionExitRequested:
            console.print("[dim]Stopped. Nothing was saved.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except JourneyError as e:
            console.print(f"[red]Error: {e.message}[/red]")


if __name__ == "__main__":
    main()
