"""Interactive CLI application."""
import logging
import uuid
from dataclasses import replace
from datetime import date
from itertools import groupby

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt, IntPrompt
from rich.table import Table

from study_planner.dashboard import (
    activity_heatmap, chapter_progress, exam_countdown, get_readiness_color,
    get_readiness_label, get_study_stats, syllabus_progress, todays_sessions,
)
from study_planner.db import init_db, DEFAULT_DB_PATH
from study_planner.models import COMPLETED, Profile, QuizResult, StudySession
from study_planner.planner import (
    complete_onboarding, recalculate_plan, record_quiz_result, update_profile,
)
from study_planner.progression import is_passing
from study_planner.quizzes import bank_quiz_generator, build_quiz_result, percentage
from study_planner.scheduler import DEFAULT_SESSION_MINUTES, parse_exam_date
from study_planner.sessions import (
    add_session, delete_session, get_session, new_custom_session_id, toggle_status, update_session,
)
from study_planner.store import (
    get_current_uid, get_int_setting, get_setting, load, save, set_current_uid,
)
from study_planner.syllabus import available_classes, available_subjects, build_syllabus, current_topic

console = Console()
logger = logging.getLogger(__name__)

EXIT_WORDS = ("q", "menu")
QUIZ_LENGTH = 5


class SessionExitRequested(Exception):
    """Raised when the learner leaves an interactive activity early."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str] = None) -> int:
    answer = Prompt.ask(prompt, choices=(choices + list(EXIT_WORDS)) if choices else None)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return int(answer)


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def show_welcome(snapshot):
    console.print(Panel(
        f"[bold]Welcome back, {snapshot.profile.name}[/bold]\n"
        f"[dim]Class {snapshot.profile.class_level} · {snapshot.profile.daily_study_hours} h/day[/dim]",
        title="Study Planner", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("today", "Today's sessions"),
        ("plan", "Full study roadmap"),
        ("done", "Toggle a session complete/planned"),
        ("add", "Add a custom session"),
        ("edit", "Edit a session"),
        ("delete", "Delete a session"),
        ("quiz", "Take a topic quiz"),
        ("hours", "Change daily study hours"),
        ("recalc", "Regenerate the roadmap"),
        ("dashboard", "Progress overview"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def session_table(sessions, title: str) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Date")
    table.add_column("Subject", style="cyan")
    table.add_column("Topic")
    table.add_column("Min", justify="right")
    table.add_column("Status")
    for i, s in enumerate(sessions, 1):
        status = "[green]Done[/green]" if s.status == COMPLETED else "[dim]Planned[/dim]"
        table.add_row(str(i), s.date.isoformat(), s.subject, s.topic_title, str(s.duration_minutes), status)
    return table


def pick_session(sessions):
    if not sessions:
        console.print("[yellow]No sessions in your plan.[/yellow]")
        return None
    console.print(session_table(sessions, "Sessions"))
    idx = IntPrompt.ask("Session number", choices=[str(i) for i in range(1, len(sessions) + 1)])
    return sessions[idx - 1]


def ask_exam_date(default: str = None) -> str:
    while True:
        value = Prompt.ask("Exam date (YYYY-MM-DD)", default=default)
        if parse_exam_date(value):
            return value
        console.print("[red]Use the YYYY-MM-DD format.[/red]")


def cmd_onboard(db_path: str, today: date):
    console.print(Panel("[bold]Set up your study lab[/bold]", border_style="blue"))
    name = Prompt.ask("Your name")
    class_level = Prompt.ask("Class", choices=available_classes(), default="10")
    options = available_subjects(class_level)
    for i, sub in enumerate(options, 1):
        console.print(f"  [cyan]{i}[/cyan]) {sub}")
    picked = Prompt.ask("Subjects (comma separated numbers)", default="1")
    subjects = []
    for part in picked.split(","):
        part = part.strip()
        if part.isdigit() and 1 <= int(part) <= len(options) and options[int(part) - 1] not in subjects:
            subjects.append(options[int(part) - 1])
    if not subjects:
        subjects = options[:1]
    exam_date = ask_exam_date()
    hours = IntPrompt.ask("Daily study hours", default=3)

    profile = Profile(
        uid=uuid.uuid4().hex, name=name, class_level=class_level, subjects=tuple(subjects),
        exam_date=exam_date, daily_study_hours=hours,
    )
    snapshot = complete_onboarding(
        profile, build_syllabus(class_level, subjects), today,
        session_minutes=get_int_setting(db_path, "session_minutes", DEFAULT_SESSION_MINUTES),
    )
    save(db_path, snapshot)
    set_current_uid(db_path, profile.uid)
    console.print(f"[green]Plan ready: {len(snapshot.sessions)} sessions scheduled.[/green]")
    return snapshot


def cmd_today(snapshot, today: date):
    sessions = todays_sessions(snapshot.sessions, today)
    if not sessions:
        console.print("[yellow]Nothing scheduled for today.[/yellow]")
        return snapshot
    console.print(session_table(sessions, f"Today · {today.isoformat()}"))
    return snapshot


def cmd_plan(snapshot, today: date):
    if not snapshot.sessions:
        console.print("[yellow]Your roadmap is empty. Try 'recalc'.[/yellow]")
        return snapshot
    ordered = sorted(snapshot.sessions, key=lambda s: s.date)
    for day, group in groupby(ordered, key=lambda s: s.date):
        group = list(group)
        marker = " [bold blue](today)[/bold blue]" if day == today else ""
        console.print(f"\n[bold]{day.isoformat()}[/bold]{marker}")
        for s in group:
            tick = "[green]✔[/green]" if s.status == COMPLETED else "[dim]○[/dim]"
            console.print(f"  {tick} [cyan]{s.subject}[/cyan] {s.topic_title} [dim]({s.duration_minutes} min)[/dim]")
    return snapshot


def cmd_done(snapshot, today: date):
    session = pick_session(snapshot.sessions)
    if session is None:
        return snapshot
    snapshot = replace(snapshot, sessions=toggle_status(snapshot.sessions, session.id))
    updated = get_session(snapshot.sessions, session.id)
    console.print(f"[green]{updated.topic_title} marked {updated.status}.[/green]")
    return snapshot


def _session_form(snapshot, session=None, today: date = None) -> dict:
    subjects = list(snapshot.profile.subjects) or ["General"]
    when = Prompt.ask("Date (YYYY-MM-DD)", default=(session.date if session else today).isoformat())
    parsed = parse_exam_date(when)
    if parsed is None:
        raise ValueError(f"Not a date: {when}")
    subject = Prompt.ask("Subject", choices=subjects, default=session.subject if session else subjects[0])
    title = Prompt.ask("Topic", default=session.topic_title) if session else Prompt.ask("Topic")
    if not title.strip():
        raise ValueError("Topic can't be empty")
    return {
        "date": parsed,
        "subject": subject,
        "topic_title": title.strip(),
        "duration_minutes": IntPrompt.ask("Minutes", default=session.duration_minutes if session else 60),
    }


def cmd_add(snapshot, today: date):
    fields = _session_form(snapshot, today=today)
    session = StudySession(id=new_custom_session_id(), **fields)
    console.print(f"[green]Added {session.topic_title} on {session.date.isoformat()}.[/green]")
    return replace(snapshot, sessions=add_session(snapshot.sessions, session))


def cmd_edit(snapshot, today: date):
    session = pick_session(snapshot.sessions)
    if session is None:
        return snapshot
    edited = replace(session, **_session_form(snapshot, session=session))
    console.print("[green]Session updated.[/green]")
    return replace(snapshot, sessions=update_session(snapshot.sessions, edited))


def cmd_delete(snapshot, today: date):
    session = pick_session(snapshot.sessions)
    if session is None:
        return snapshot
    console.print(f"[green]Deleted {session.topic_title}.[/green]")
    return replace(snapshot, sessions=delete_session(snapshot.sessions, session.id))


def run_quiz_session(questions) -> list[str]:
    """Ask each question and return the chosen option texts."""
    answers = []
    console.print(f"\n[bold]Quiz[/bold] — {len(questions)} questions [dim](q to stop)[/dim]\n")
    for i, q in enumerate(questions, 1):
        console.print(f"[bold]Q{i}.[/bold] {q.question}\n")
        for n, option in enumerate(q.options, 1):
            console.print(f"  [cyan]{n})[/cyan] {option}")
        choice = session_int_prompt("\nYour answer", choices=[str(n) for n in range(1, len(q.options) + 1)])
        answer = q.options[choice - 1]
        answers.append(answer)
        if answer == q.correct_answer:
            console.print("[green]Correct![/green]")
        else:
            console.print(f"[red]Incorrect.[/red] Answer: [green]{q.correct_answer}[/green]")
        if q.explanation:
            console.print(f"[dim]{q.explanation}[/dim]")
        console.print()
    return answers


def cmd_quiz(snapshot, today: date, generate=None):
    chapters = [ch for ch in snapshot.syllabus if ch.topics]
    if not chapters:
        console.print("[yellow]No topics to quiz on.[/yellow]")
        return snapshot
    subject = Prompt.ask("Subject", choices=[ch.subject for ch in chapters], default=chapters[0].subject)
    chapter = next(ch for ch in chapters if ch.subject == subject)
    target = current_topic(chapter)
    topic = Prompt.ask("Topic", choices=[t.title for t in chapter.topics], default=target.title)

    generate = generate or bank_quiz_generator()
    questions = generate(subject, topic, QUIZ_LENGTH)
    result_id = uuid.uuid4().hex
    if questions:
        try:
            answers = run_quiz_session(questions)
        except SessionExitRequested:
            console.print("[dim]Quiz abandoned, nothing recorded.[/dim]")
            return snapshot
        result = build_quiz_result(result_id, snapshot.profile.uid, subject, topic, questions, answers)
    else:
        console.print("[dim]No bundled questions for this topic; enter a score from elsewhere.[/dim]")
        total = IntPrompt.ask("Questions asked", default=5)
        score = IntPrompt.ask("Correct answers", default=0)
        if total < 1:
            raise ValueError("A quiz needs at least one question")
        if not 0 <= score <= total:
            raise ValueError(f"Correct answers must be between 0 and {total}")
        result = QuizResult(
            id=result_id, user_id=snapshot.profile.uid, date=today.isoformat(),
            subject=subject, topic_title=topic, score=score, total=total,
        )

    passed = is_passing(result.score, result.total)
    colour = "green" if passed else "red"
    console.print(
        f"[bold]Score: {result.score}/{result.total} ({percentage(result)}%)[/bold] "
        f"[{colour}]{'Passed' if passed else 'Keep practising'}[/{colour}]\n"
    )
    return record_quiz_result(snapshot, result)


def cmd_hours(snapshot, today: date, session_minutes: int = DEFAULT_SESSION_MINUTES):
    hours = IntPrompt.ask("Daily study hours", default=snapshot.profile.daily_study_hours)
    profile = replace(snapshot.profile, daily_study_hours=hours)
    snapshot = update_profile(snapshot, profile, today, session_minutes=session_minutes)
    console.print(f"[green]Now planning {hours} h/day.[/green]")
    return snapshot


def cmd_recalc(snapshot, today: date, session_minutes: int = DEFAULT_SESSION_MINUTES):
    snapshot = recalculate_plan(snapshot, today, session_minutes=session_minutes)
    console.print(f"[green]Roadmap regenerated: {len(snapshot.sessions)} sessions.[/green]")
    return snapshot


def cmd_dashboard(snapshot, today: date):
    progress = syllabus_progress(snapshot.syllabus)
    stats = get_study_stats(snapshot)
    countdown = exam_countdown(snapshot.profile.exam_date, today)

    header = f"{progress['completed']}/{progress['total']} topics mastered"
    if countdown:
        if countdown["is_expired"]:
            header += " · exam date passed"
        elif countdown["is_today"]:
            header += " · [bold red]exam today[/bold red]"
        else:
            style = "red" if countdown["is_urgent"] else "cyan"
            header += f" · [{style}]{countdown['days']} days to exam[/{style}]"
    console.print(Panel(f"[bold]{header}[/bold]", title="Dashboard", border_style="blue"))

    score = stats["avg_quiz_score"]
    color = get_readiness_color(score)
    bar_filled = int(progress["percent"] / 5)
    bar = f"[{color}]{'█' * bar_filled}{'░' * (20 - bar_filled)}[/{color}]"
    console.print(
        f"\n  Syllabus: [bold]{progress['percent']}%[/bold] {bar}  "
        f"Avg quiz: [bold]{score}%[/bold] [{color}]{get_readiness_label(score)}[/{color}]\n"
    )

    table = Table(title="Chapters")
    table.add_column("Subject", style="cyan")
    table.add_column("Progress", justify="right")
    table.add_column("Next topic")
    for ch in snapshot.syllabus:
        cp = chapter_progress(ch)
        table.add_row(cp["subject"], f"{cp['percent']}%", cp["current_topic"] or "-")
    console.print(table)

    shades = ["dim", "green", "bold green", "bold bright_green"]
    heat = "  ".join(f"[{shades[d['intensity']]}]{d['day']}:{d['count']}[/{shades[d['intensity']]}]"
                     for d in activity_heatmap(snapshot, today))
    console.print(f"\n  Last 7 days: {heat}")
    console.print(f"\n  Sessions done: [bold]{stats['sessions_completed']}[/bold]  |  "
                  f"Planned: [bold]{stats['sessions_planned']}[/bold]  |  "
                  f"Quizzes: [bold]{stats['quizzes_taken']}[/bold]  |  "
                  f"Doubts: [bold]{stats['doubts_solved']}[/bold]  |  "
                  f"Notes: [bold]{stats['notes_saved']}[/bold]  |  "
                  f"Streak: [bold]{stats['streak']}[/bold]")
    return snapshot


COMMANDS = {
    "today": cmd_today,
    "plan": cmd_plan,
    "done": cmd_done,
    "add": cmd_add,
    "edit": cmd_edit,
    "delete": cmd_delete,
    "quiz": cmd_quiz,
    "dashboard": cmd_dashboard,
}


def dispatch(db_path: str, snapshot, choice: str, today: date):
    """Run one command and persist the snapshot it returns if it changed."""
    session_minutes = get_int_setting(db_path, "session_minutes", DEFAULT_SESSION_MINUTES)
    if choice == "hours":
        updated = cmd_hours(snapshot, today, session_minutes=session_minutes)
    elif choice == "recalc":
        updated = cmd_recalc(snapshot, today, session_minutes=session_minutes)
    elif choice in COMMANDS:
        updated = COMMANDS[choice](snapshot, today)
    else:
        console.print("[red]Unknown command. Try again.[/red]")
        return snapshot
    if updated != snapshot:
        save(db_path, updated)
        logger.debug("Saved after %s", choice)
    return updated


def main():
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    configure_logging(get_setting(db_path, "log_level", "WARNING"))

    uid = get_current_uid(db_path)
    snapshot = load(db_path, uid) if uid else None
    if snapshot is None or not snapshot.profile.onboarded:
        snapshot = cmd_onboard(db_path, date.today())

    show_welcome(snapshot)

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="today").strip().lower()
        if choice in ("quit", "exit", "q"):
            console.print("[dim]Good luck on your exam![/dim]")
            break
        try:
            snapshot = dispatch(db_path, snapshot, choice, date.today())
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.debug("Command %s failed", choice, exc_info=True)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
