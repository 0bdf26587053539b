"""Interface for interacting with the user (input/output).

Defines the contract for displaying information, errors, warnings, task
progress and analysis results, allowing different UI implementations.
"""

import abc
from typing import Any, Optional

from ..models.analysis import OCRResult, QuestionAnalysisResult
from ..models.tasks import TaskUpdate


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_output(self, output: str, **kwargs: Any) -> None:
        """Displays standard output to the user.

        Args:
            output: The text to display.
            **kwargs: Additional arguments for formatting (e.g., title).
        """
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        pass

    @abc.abstractmethod
    def display_progress(self, update: TaskUpdate, label: Optional[str] = None) -> None:
        """Shows one poll update of a running task."""
        pass

    @abc.abstractmethod
    def display_ocr_result(self, result: OCRResult) -> None:
        pass

    @abc.abstractmethod
    def display_analysis(self, result: QuestionAnalysisResult) -> None:
        """Renders a step-by-step solution."""
        pass
