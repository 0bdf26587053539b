import pytest
from unittest.mock import MagicMock
from rich.console import Console
from rich.panel import Panel

from learnassist.domain.models.analysis import (
    KnowledgePoint,
    OCRResult,
    QuestionAnalysisResult,
    RelatedResource,
    SolutionStep,
)
from learnassist.domain.models.tasks import TaskStatus, TaskUpdate
from learnassist.infrastructure.cli.display import ConsoleDisplay

@pytest.fixture
def recording_console():
    """Console that keeps everything printed for export_text()."""
    return Console(record=True, width=100, color_system=None)

@pytest.fixture
def console_display(recording_console: Console):
    return ConsoleDisplay(console=recording_console)

def test_display_error_uses_panel():
    mock_console = MagicMock()
    display = ConsoleDisplay(console=mock_console)
    display.display_error("Something went wrong")
    mock_console.print.assert_called_once()
    args, _ = mock_console.print.call_args
    assert isinstance(args[0], Panel)

def test_display_info_and_warning_text(console_display: ConsoleDisplay, recording_console: Console):
    console_display.display_info("Process completed")
    console_display.display_warning("Careful")
    text = recording_console.export_text()
    assert "Process completed" in text
    assert "Careful" in text
    assert "Warning" in text

def test_display_progress_line(console_display: ConsoleDisplay, recording_console: Console):
    console_display.display_progress(
        TaskUpdate(attempt=2, max_attempts=10, status=TaskStatus.PROCESSING, progress=42.4), label="OCR"
    )
    text = recording_console.export_text()
    assert "OCR [2/10] processing 42%" in text

def test_display_progress_without_progress(console_display: ConsoleDisplay, recording_console: Console):
    console_display.display_progress(TaskUpdate(attempt=1, max_attempts=3, status=TaskStatus.COMPLETED))
    assert "[1/3] completed" in recording_console.export_text()

def test_display_progress_failed_poll(console_display: ConsoleDisplay, recording_console: Console):
    console_display.display_progress(TaskUpdate(attempt=3, max_attempts=10, status=None, error="Network unavailable"))
    assert "[3/10] poll failed: Network unavailable" in recording_console.export_text()

def test_display_ocr_result(console_display: ConsoleDisplay, recording_console: Console):
    console_display.display_ocr_result(OCRResult(text="2x + 3 = 7", confidence=0.9, latex="2x+3=7"))
    text = recording_console.export_text()
    assert "2x + 3 = 7" in text
    assert "LaTeX: 2x+3=7" in text
    assert "90% confidence" in text

def test_display_analysis_orders_steps(console_display: ConsoleDisplay, recording_console: Console):
    result = QuestionAnalysisResult(
        question_id="q-1",
        question_text="x^2 - 5x + 6 = 0",
        subject="mathematics",
        difficulty="easy",
        explanation="Factor the quadratic.",
        solution_steps=[
            SolutionStep(step_number=2, content="Read off the roots"),
            SolutionStep(step_number=1, content="Factor into (x-2)(x-3)"),
        ],
        knowledge_points=[KnowledgePoint(name="Factoring", description="Splitting polynomials")],
        related_resources=[RelatedResource(title="Quadratics", url="https://example.com/q", type="video")],
    )
    console_display.display_analysis(result)
    text = recording_console.export_text()
    assert text.index("Factor into") < text.index("Read off the roots")
    assert "Factor the quadratic." in text
    assert "Factoring" in text
    assert "https://example.com/q" in text
    assert "id q-1" in text
