import logging
from typing import Any, Optional

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from learnassist.domain.interfaces.user_interface import UserInterface
from learnassist.domain.models.analysis import OCRResult, QuestionAnalysisResult
from learnassist.domain.models.tasks import TaskStatus, TaskUpdate

logger = logging.getLogger(__name__)

STATUS_STYLES = {
    TaskStatus.PROCESSING: "yellow",
    TaskStatus.COMPLETED: "green",
    TaskStatus.FAILED: "red",
}

class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        """Initializes the rich Console (tests pass one that records output)."""
        self._console = console or Console()

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_output(self, output: str, **kwargs: Any) -> None:
        """Displays output text to the user, rendering Markdown.

        Args:
            output: The text to display.
            **kwargs: Additional arguments including:
                - title: Panel title (default: "Result")
        """
        title = kwargs.get("title", "Result")
        panel = Panel(
            Markdown(str(output)),
            title=f"[bold white]{title}[/bold white]",
            title_align="left",
            border_style="blue",
            box=ROUNDED,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style."""
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        logger.warning(f"Display warning: {warning_message}")
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_progress(self, update: TaskUpdate, label: Optional[str] = None) -> None:
        """Prints one line per poll: attempt counter, status and progress."""
        style = STATUS_STYLES.get(update.status, "white")
        line = Text()
        if label:
            line.append(f"{label} ", style="bold")
        line.append(f"[{update.attempt}/{update.max_attempts}] ", style="dim")
        if update.status is None:
            line.append(f"poll failed: {update.error}", style="yellow")
            self.console.print(line)
            return
        line.append(update.status.value, style=style)
        if update.progress is not None:
            line.append(f" {update.progress:.0f}%", style="cyan")
        self.console.print(line)

    def display_ocr_result(self, result: OCRResult) -> None:
        body = Text(result.text or "(no text recognised)", style="white")
        if result.latex:
            body.append(f"\n\nLaTeX: {result.latex}", style="cyan")
        panel = Panel(
            body,
            title=f"[bold green]Recognised text[/bold green] [dim]({result.confidence:.0%} confidence)[/dim]",
            title_align="left",
            border_style="green",
            box=ROUNDED,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_analysis(self, result: QuestionAnalysisResult) -> None:
        """Renders the question, its solution steps, explanation and resources."""
        header = Text(result.question_text, style="bold white")
        header.append(f"\n{result.subject or 'unknown subject'} · {result.difficulty}", style="dim")
        if result.question_id:
            header.append(f" · id {result.question_id}", style="dim")
        self.console.print(Panel(header, title="[bold blue]Question[/bold blue]", border_style="blue",
                                 box=ROUNDED, padding=(0, 1)))

        if result.solution_steps:
            steps = Table(title="Solution", box=SIMPLE, show_header=True, header_style="bold magenta")
            steps.add_column("#", justify="right", style="cyan", no_wrap=True)
            steps.add_column("Step")
            steps.add_column("LaTeX", style="dim")
            for step in sorted(result.solution_steps, key=lambda s: s.step_number):
                steps.add_row(str(step.step_number), step.content, step.latex or "")
            self.console.print(steps)

        if result.explanation:
            self.console.print(Panel(Markdown(result.explanation), title="[bold white]Explanation[/bold white]",
                                     border_style="white", box=SIMPLE, padding=(0, 1)))

        if result.knowledge_points:
            points = Table(title="Knowledge points", box=SIMPLE, header_style="bold magenta")
            points.add_column("Name", style="bold")
            points.add_column("Difficulty")
            points.add_column("Description")
            for point in result.knowledge_points:
                points.add_row(point.name, point.difficulty, point.description)
            self.console.print(points)

        for resource in result.related_resources:
            self.console.print(Text(f"  [{resource.type}] {resource.title}: {resource.url}", style="dim cyan"))
