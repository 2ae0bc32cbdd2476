import typer
from rich.console import Console
from rich.table import Table
from pydantic import ValidationError
from typing import Optional, List
from datetime import datetime

from examprep.config import settings
from examprep.database import SessionLocal, init_db
from examprep.crud import get_due_question_ids
from examprep.logging_config import configure_logging
from examprep.mastery import record_level
from examprep.priority import calculate_priority
from examprep.schemas import PracticeMode, PracticeRequest, ReviewRequest, utcnow
from examprep.service import MasteryService
from examprep.store import SQLAlchemyMasteryStore

app = typer.Typer(help="Exam Prep CLI - spaced repetition scheduling for practice questions")
console = Console()


@app.callback()
def main(log_level: Optional[str] = typer.Option(None, help="Log level (default from settings)")):
    configure_logging(log_level or settings.log_level)


def _format_time(value: Optional[datetime]) -> str:
    if value is None:
        return "-"
    return value.astimezone().strftime("%Y-%m-%d %H:%M")


def _parse_ids(raw: str) -> List[int]:
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        console.print(f"[red]✗[/red] Question IDs must be comma-separated integers: {raw}")
        raise typer.Exit(code=1)


def _print_validation_error(error: ValidationError):
    for detail in error.errors():
        field = ".".join(str(part) for part in detail["loc"])
        console.print(f"[red]✗[/red] {field}: {detail['msg']}")


@app.command()
def init():
    """Initialize database tables"""
    init_db()
    console.print("[green]✓[/green] Database initialized successfully!")


@app.command()
def reset_db():
    """Delete all mastery data and reinitialize database (WARNING: irreversible!)"""
    confirm = typer.confirm("⚠️  This will DELETE ALL DATA. Are you sure?")
    if not confirm:
        console.print("[yellow]Cancelled.[/yellow]")
        return

    import examprep.models  # noqa: F401
    from examprep.database import engine, Base
    console.print("[yellow]Dropping all tables...[/yellow]")
    Base.metadata.drop_all(bind=engine)
    console.print("[yellow]Recreating tables...[/yellow]")
    Base.metadata.create_all(bind=engine)
    console.print("[green]✓[/green] Database reset complete! All data deleted.")


@app.command()
def review(
    user_id: str,
    question_id: int,
    correct: bool = typer.Option(..., "--correct/--incorrect", help="Whether the answer was correct"),
    cram: bool = typer.Option(False, "--cram", help="Schedule with compressed cram intervals"),
    exam_days: Optional[int] = typer.Option(None, help="Days until the exam (cram mode)"),
):
    """Record an answered question and update its schedule"""
    db = SessionLocal()
    try:
        request = ReviewRequest(
            user_id=user_id,
            question_id=question_id,
            is_correct=correct,
            is_cram_mode=cram,
            exam_days_remaining=exam_days if exam_days is not None else settings.default_exam_days,
        )
        service = MasteryService(SQLAlchemyMasteryStore(db))
        record = service.update_mastery(request)

        console.print(f"[green]✓[/green] Review recorded!")
        console.print(f"  Question: {record.question_id} ({'correct' if correct else 'incorrect'})")
        console.print(f"  Level: {record_level(record).value}")
        console.print(f"  Next review: {_format_time(record.next_review_at)} (in {record.interval_days:.2f} days)")
        console.print(f"  Easiness: {record.ease_factor:.2f}")
        console.print(f"  Repetitions: {record.repetitions}")
    except ValidationError as e:
        _print_validation_error(e)
        raise typer.Exit(code=1)
    finally:
        db.close()


@app.command()
def practice(
    user_id: str,
    questions: str = typer.Option(..., help="Candidate question IDs (comma-separated)"),
    mode: PracticeMode = typer.Option(PracticeMode.SMART, help="Selection mode"),
    count: Optional[int] = typer.Option(None, help="Number of questions (default from settings)"),
    exam_days: Optional[int] = typer.Option(None, help="Days until the exam (cram mode)"),
):
    """Select an ordered batch of questions for a practice session"""
    db = SessionLocal()
    try:
        request = PracticeRequest(
            user_id=user_id,
            mode=mode,
            question_ids=_parse_ids(questions),
            count=count if count is not None else settings.default_session_size,
            exam_days_remaining=exam_days if exam_days is not None else settings.default_exam_days,
        )
        service = MasteryService(SQLAlchemyMasteryStore(db))
        now = utcnow()
        selected = service.select_practice_questions(request, now)

        if not selected:
            console.print("[yellow]No questions selected.[/yellow]")
            return

        mastery = {record.question_id: record for record in service.get_mastery_for_user(user_id)}

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Question", style="cyan")
        table.add_column("Level", style="green")
        table.add_column("Next Review", style="yellow")
        table.add_column("Priority", style="blue", justify="right")

        for position, question_id in enumerate(selected, 1):
            record = mastery.get(question_id)
            table.add_row(
                str(position),
                str(question_id),
                record_level(record).value if record else "new",
                _format_time(record.next_review_at) if record else "-",
                f"{calculate_priority(record, now):.1f}",
            )

        console.print(f"\n[bold]Practice batch ({request.mode.value} mode)[/bold]\n")
        console.print(table)
    except ValidationError as e:
        _print_validation_error(e)
        raise typer.Exit(code=1)
    finally:
        db.close()


@app.command()
def mastery(
    user_id: str,
    question_id: Optional[int] = typer.Option(None, help="Show a single question"),
):
    """View mastery records with their derived levels"""
    db = SessionLocal()
    try:
        service = MasteryService(SQLAlchemyMasteryStore(db))
        if question_id is not None:
            record = service.get_mastery_for_question(user_id, question_id)
            records = [record] if record else []
        else:
            records = service.get_mastery_for_user(user_id)

        if not records:
            console.print(f"[yellow]No mastery records found for user {user_id}[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Question", style="cyan")
        table.add_column("Level", style="green")
        table.add_column("Ease", justify="right")
        table.add_column("Interval (days)", justify="right")
        table.add_column("Reps", justify="right")
        table.add_column("Reviews", justify="right")
        table.add_column("Next Review", style="yellow")

        for record in sorted(records, key=lambda r: r.question_id):
            table.add_row(
                str(record.question_id),
                record_level(record).value,
                f"{record.ease_factor:.2f}",
                f"{record.interval_days:.2f}",
                str(record.repetitions),
                str(record.review_count),
                _format_time(record.next_review_at),
            )

        console.print(table)
    finally:
        db.close()


@app.command()
def stats(
    user_id: str,
    total: int = typer.Option(..., help="Total number of questions in the pool"),
):
    """View dashboard statistics"""
    db = SessionLocal()
    try:
        service = MasteryService(SQLAlchemyMasteryStore(db))
        # Local time so "due today" follows the user's calendar day
        summary = service.get_overall_mastery(user_id, total, datetime.now().astimezone())

        console.print(f"\n[bold]Mastery - user {user_id}[/bold]\n")
        console.print(f"[cyan]Statistics:[/cyan]")
        console.print(f"  Total questions: {summary.total_questions}")
        console.print(f"  New: {summary.new_count}")
        console.print(f"  Learning: {summary.learning_count}")
        console.print(f"  Reviewing: {summary.reviewing_count}")
        console.print(f"  Mastered: {summary.mastered_count}")
        console.print(f"  Average easiness: {summary.average_ease_factor:.2f}")
        console.print(f"  Due today: {summary.due_today}")
        console.print(f"  Overdue: {summary.overdue_count}")
    finally:
        db.close()


@app.command()
def due(
    user_id: str,
    limit: int = typer.Option(50, help="Maximum number of questions"),
):
    """List questions due for review"""
    db = SessionLocal()
    try:
        question_ids = get_due_question_ids(db, user_id, utcnow(), limit)
        if not question_ids:
            console.print(f"[yellow]Nothing due for user {user_id}[/yellow]")
            return

        console.print(f"\n[yellow]Questions Due for Review:[/yellow] {', '.join(str(q) for q in question_ids)}")
    finally:
        db.close()


@app.command()
def history(
    user_id: str,
    limit: int = typer.Option(10, help="Number of reviews to show"),
):
    """View recent reviews"""
    db = SessionLocal()
    try:
        reviews = SQLAlchemyMasteryStore(db).recent_reviews(user_id, limit)
        if not reviews:
            console.print(f"[yellow]No reviews found for user {user_id}[/yellow]")
            return

        console.print(f"\n[cyan]Recent Reviews:[/cyan]")
        for entry in reviews:
            outcome = "[green]correct[/green]" if entry.is_correct else "[red]incorrect[/red]"
            mode_str = " (cram)" if entry.is_cram_mode else ""
            console.print(
                f"  {_format_time(entry.reviewed_at)} - question {entry.question_id} - {outcome}{mode_str}"
                f" - next in {entry.interval_days:.2f} days"
            )
    finally:
        db.close()


if __name__ == "__main__":
    app()
