"""Interactive CLI application."""
import logging
import sys

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from learnos.config import configure_logging, load_settings
from learnos.errors import LearnOSError, MaterialRequiredError
from learnos.generation import GeminiClient
from learnos.importer import is_material_file, load_material
from learnos.models import MULTIPLE_CHOICE, TRUE_FALSE
from learnos.progress import format_average, score_color, score_label
from learnos.quiz import TRUE_FALSE_OPTIONS, QuizRunner, answer_matches, resolve_answer
from learnos.session import Phase, StudySession, View, require_material

logger = logging.getLogger(__name__)

console = Console()

SAMPLE_MATERIAL = (
    "The Krebs cycle, also known as the citric acid cycle, is a series of chemical reactions used by all "
    "aerobic organisms to release stored energy through the oxidation of acetyl-CoA derived from "
    "carbohydrates, fats, and proteins. In eukaryotes, the Krebs cycle occurs in the matrix of the "
    "mitochondrion. The cycle consumes acetate (in the form of acetyl-CoA) and water, reduces NAD+ to "
    "NADH, and produces carbon dioxide. The NADH is then used by the oxidative phosphorylation pathway to "
    "generate ATP, the main energy currency of the cell."
)

SAMPLE_PLANNER_TEXT = (
    "Quantum computing is a type of computation that harnesses the collective properties of quantum "
    "states, such as superposition, interference, and entanglement, to perform calculations. The devices "
    "that perform quantum computations are known as quantum computers. They are believed to be able to "
    "solve certain computational problems, such as integer factorization (which underlies RSA "
    "encryption), substantially faster than classical computers. The study of quantum computing is a "
    "subfield of quantum information science.\n\n"
    "There are several models of quantum computation, including the quantum circuit model, the quantum "
    "Turing machine, the adiabatic quantum computer, the one-way quantum computer, and various quantum "
    "cellular automata. The most widely used model is the quantum circuit, based on the quantum bit, or "
    "\"qubit,\" which is somewhat analogous to the bit in classical computation. A qubit can be a 1 or a "
    "0, or a superposition of both."
)

QUIZ_HINT = "Answer ([cyan]/n[/cyan] next, [cyan]/b[/cyan] back, [cyan]/s[/cyan] submit)"
GUIDE_LOADING_MESSAGE = "Generating your personalized study guide... this may take a moment."
QUIZ_LOADING_MESSAGE = "Generating your quiz..."


def show_welcome():
    console.print(Panel(
        "[bold]LearnOS[/bold]\n[dim]Study guides, quizzes and study plans from your own notes[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("new", "Generate a study guide from material"),
        ("study", "View the current study guide"),
        ("quiz", "Take the quiz for the current guide"),
        ("share", "Get a share link for the current guide"),
        ("open", "Open a share link"),
        ("plan", "Build a multi-day study plan"),
        ("progress", "Quiz history and average score"),
        ("dashboard", "Back to the dashboard"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def loading_message(session: StudySession) -> str:
    state = session.state
    if state.view is View.STUDY and not state.quiz:
        return QUIZ_LOADING_MESSAGE
    return GUIDE_LOADING_MESSAGE


def show_error_banner(message: str) -> None:
    console.print(Panel(
        f"[bold]Oops! Something went wrong.[/bold]\n{escape(message)}",
        border_style="red",
    ))


def render_study(session: StudySession) -> None:
    state = session.state
    guide = state.guide
    console.print(Panel(Markdown(guide.summary), title=f"[bold]{escape(guide.title)}[/bold]", border_style="blue"))
    if guide.key_concepts:
        console.print("\n[bold]Key Concepts[/bold]")
    for i, concept in enumerate(guide.key_concepts, 1):
        console.print(f"\n[bold cyan]{i}. {escape(concept.concept)}[/bold cyan]")
        console.print(Markdown(concept.explanation))
        if concept.visual_aid:
            console.print(Panel(Text(concept.visual_aid), title="Visual Aid", border_style="dim", expand=False))
    if state.error:
        console.print(f"\n[red]{escape(state.error)}[/red]")
    if state.quiz:
        console.print("\n[green]Ready to test your knowledge? Use 'quiz'.[/green]")
    else:
        console.print("\n[yellow]No quiz yet. Use 'quiz' to generate one.[/yellow]")


def render_question(runner: QuizRunner) -> None:
    q = runner.current
    console.print(Panel(
        Text(q.display_text()),
        title=f"Question {runner.index + 1}/{runner.total}",
        subtitle=q.question_type,
        border_style="cyan",
    ))
    if q.question_type == MULTIPLE_CHOICE and q.options:
        for i, option in enumerate(q.options, 1):
            console.print(f"  [cyan]{i})[/cyan] {escape(option)}")
    elif q.question_type == TRUE_FALSE:
        for option in TRUE_FALSE_OPTIONS:
            console.print(f"  [cyan]{option[0].lower()})[/cyan] {option}")
    answer = runner.answers.get(runner.index)
    if answer is not None:
        console.print(f"[dim]Your answer: {escape(answer)}[/dim]")


def run_quiz(questions) -> QuizRunner:
    runner = QuizRunner(questions)
    console.print(f"\n[bold]Quiz[/bold] ({runner.total} questions)\n")
    while not runner.submitted:
        render_question(runner)
        raw = Prompt.ask(QUIZ_HINT, default="").strip()
        command = raw.lower()
        if command in ("/n", "/next"):
            runner.next()
        elif command in ("/b", "/back"):
            runner.back()
        elif command in ("/s", "/submit"):
            runner.submit()
        elif raw:
            runner.select_answer(resolve_answer(runner.current, raw))
            runner.next()
    return runner


def render_quiz_review(questions, answers: dict, score: int, total: int) -> None:
    pct = score / total * 100 if total else 0.0
    color = score_color(pct)
    console.print(f"\n[bold]Score: [{color}]{score}/{total} ({pct:.0f}%)[/{color}][/bold]\n")
    for i, q in enumerate(questions):
        answer = answers.get(i)
        correct = answer_matches(answer, q.answer)
        mark = "[green]Correct[/green]" if correct else "[red]Incorrect[/red]"
        console.print(f"[bold]Q{i + 1}.[/bold] {escape(q.display_text())}  {mark}")
        console.print(f"  Your answer: {escape(answer) if answer is not None else '[dim]unanswered[/dim]'}")
        if not correct:
            console.print(f"  Answer: [green]{escape(q.answer)}[/green]")
        if q.explanation:
            console.print(Markdown(q.explanation))
        console.print()


def render_progress(session: StudySession) -> None:
    history = session.state.history
    if not history:
        console.print("[yellow]No quizzes taken yet. Finish a quiz to see your progress.[/yellow]")
        return
    console.print(Panel(
        f"Quizzes taken: [bold]{len(history)}[/bold]  |  "
        f"Average score: [bold]{format_average(session.average_score())}[/bold]",
        title="Progress", border_style="blue",
    ))
    table = Table(title="Quiz History")
    table.add_column("#", justify="right")
    table.add_column("Study Guide", style="cyan")
    table.add_column("Date")
    table.add_column("Score", justify="right")
    table.add_column("Status")
    for i, result in enumerate(history, 1):
        color = score_color(result.percentage)
        table.add_row(
            str(i),
            escape(result.study_guide_title),
            result.date[:16].replace("T", " "),
            f"[{color}]{result.score}/{result.total} ({result.percentage:.0f}%)[/{color}]",
            f"[{color}]{score_label(result.percentage)}[/{color}]",
        )
    console.print(table)


def read_material(prompt: str, sample: str) -> str:
    """Read pasted text up to a blank line or EOF.

    A first line of ``sample`` or an existing file path is used on its own.
    """
    first = Prompt.ask(f"{prompt} (finish with a blank line)", default="")
    if not first.strip():
        return ""
    if first.strip().lower() == "sample":
        return sample
    if is_material_file(first):
        return load_material(first)
    lines = [first]
    while True:
        try:
            line = console.input()
        except EOFError:
            break
        if not line.strip():
            break
        lines.append(line)
    return "\n".join(lines)


def cmd_dashboard(session: StudySession):
    state = session.set_view(View.DASHBOARD)
    if state.error and state.phase is Phase.FAILED:
        show_error_banner(state.error)
    if state.guide:
        console.print(f"Current guide: [bold]{escape(state.guide.title)}[/bold]")
    console.print(
        f"Quizzes taken: [bold]{len(state.history)}[/bold]  |  "
        f"Average: [bold]{format_average(session.average_score())}[/bold]"
    )


def cmd_new(session: StudySession):
    material = read_material("Paste your study material, a file path, or 'sample'", SAMPLE_MATERIAL)
    try:
        require_material(material)
    except MaterialRequiredError as e:
        console.print(f"[yellow]{e}[/yellow]")
        return
    with console.status(GUIDE_LOADING_MESSAGE):
        state = session.start_session(material)
    if state.view is View.STUDY:
        render_study(session)
    else:
        show_error_banner(state.error)


def cmd_study(session: StudySession):
    state = session.set_view(View.STUDY)
    if state.view is not View.STUDY:
        console.print("[yellow]No study guide loaded. Use 'new' or 'open' first.[/yellow]")
        return
    render_study(session)


def cmd_quiz(session: StudySession):
    state = session.set_view(View.STUDY)
    if state.view is not View.STUDY:
        console.print("[yellow]No study guide loaded. Use 'new' or 'open' first.[/yellow]")
        return
    if not state.quiz:
        with console.status(loading_message(session)):
            state = session.generate_quiz_only()
        if not state.quiz:
            console.print(f"[red]{escape(state.error or 'The AI model returned an empty quiz.')}[/red]")
            return
    runner = run_quiz(state.quiz)
    score, total, answers = runner.score, runner.total, runner.answers
    render_quiz_review(runner.questions, answers, score, total)
    session.complete_quiz(score, total, answers)
    cmd_progress(session)


def cmd_share(session: StudySession):
    url = session.share_url()
    if url is None:
        console.print("[yellow]Nothing to share yet. Generate a study guide first.[/yellow]")
        return
    console.print(Panel(url, title="Share Link", border_style="green"))


def cmd_open(session: StudySession, location: str | None = None):
    if location is None:
        location = Prompt.ask("Share link")
    state = session.open_location(location.strip())
    if state.view is View.STUDY:
        render_study(session)
    else:
        console.print("[yellow]That link does not contain a study guide.[/yellow]")


def render_plan(plan) -> None:
    console.print(Panel(
        f"Total estimated time: [bold]{escape(plan.total_estimated_time)}[/bold]",
        title=f"[bold]{escape(plan.title)}[/bold]", border_style="blue",
    ))
    table = Table(title="Study Sessions", show_lines=True)
    table.add_column("Day", justify="right")
    table.add_column("Topic", style="cyan")
    table.add_column("Objectives")
    table.add_column("Time")
    for s in plan.sessions:
        table.add_row(str(s.day), escape(s.topic), escape("\n".join(f"- {o}" for o in s.objectives)), escape(s.estimated_time))
    console.print(table)


def cmd_plan(session: StudySession):
    state = session.set_view(View.OCR_PLANNER)
    if state.plan is not None:
        render_plan(state.plan)
        again = Prompt.ask("Create another plan?", choices=["y", "n"], default="n")
        if again != "y":
            return
        session.reset_plan()
    text = read_material("Paste text, a file path (PDF, Word, HTML, ...), or 'sample'", SAMPLE_PLANNER_TEXT)
    with console.status("Generating your study plan..."):
        state = session.generate_plan(text)
    if state.plan is not None:
        render_plan(state.plan)
    else:
        console.print(f"[red]{escape(state.plan_error)}[/red]")


def cmd_progress(session: StudySession):
    session.set_view(View.PROGRESS)
    render_progress(session)
    history = session.state.history
    if not history:
        return
    choice = Prompt.ask("Show details for quiz # (Enter to skip)", default="").strip()
    if choice.isdigit() and 1 <= int(choice) <= len(history):
        result = history[int(choice) - 1]
        render_quiz_review(result.quiz, result.user_answers, result.score, result.total)


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    settings = load_settings()
    configure_logging(settings.log_level)
    session = StudySession(GeminiClient(settings), origin=settings.origin, path=settings.path)

    show_welcome()
    if not settings.api_key:
        console.print("[yellow]GEMINI_API_KEY is not set; generation requests will fail.[/yellow]")
    if argv:
        cmd_open(session, argv[0])

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="new").strip().lower()
        try:
            if choice == "new":
                cmd_new(session)
            elif choice == "study":
                cmd_study(session)
            elif choice == "quiz":
                cmd_quiz(session)
            elif choice == "share":
                cmd_share(session)
            elif choice == "open":
                cmd_open(session)
            elif choice == "plan":
                cmd_plan(session)
            elif choice == "progress":
                cmd_progress(session)
            elif choice == "dashboard":
                cmd_dashboard(session)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Happy studying![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except LearnOSError as e:
            console.print(f"[red]Error: {e}[/red]")
        except Exception as e:
            logger.debug("Unhandled error", exc_info=True)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
