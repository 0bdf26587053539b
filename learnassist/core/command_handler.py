"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py) and delegates the
work to the application services (AuthService, ImageService,
AnalysisService). This is the only layer that catches LearnAssistError
broadly; every handler displays the failure and reports it through its
boolean return value.
"""

import logging
from typing import List, Optional

from learnassist.core.api_client import ApiClient
from learnassist.core.services.analysis_service import AnalysisService
from learnassist.core.services.auth_service import AuthService
from learnassist.core.services.image_service import ImageService
from learnassist.domain.interfaces.user_interface import UserInterface
from learnassist.domain.models.analysis import OCRResult, QuestionAnalysisRequest, QuestionFeedback
from learnassist.domain.models.auth import LoginRequest, RegisterRequest
from learnassist.domain.models.cancellation import CancellationToken
from learnassist.domain.models.common import QuestionId
from learnassist.domain.models.errors import ErrorKind, LearnAssistError
from learnassist.domain.models.tasks import TaskUpdate

logger = logging.getLogger(__name__)

class CommandHandler:
    """Handles incoming commands and delegates to appropriate services."""

    def __init__(
        self,
        auth_service: AuthService,
        image_service: ImageService,
        analysis_service: AnalysisService,
        api_client: ApiClient,
        ui: UserInterface,
    ):
        """Initializes the CommandHandler with required services."""
        self.auth_service = auth_service
        self.image_service = image_service
        self.analysis_service = analysis_service
        self.api_client = api_client
        self.ui = ui

    def _report(self, action: str, error: LearnAssistError) -> None:
        logger.error(f"{action} failed: {error!r}")
        if error.kind is ErrorKind.AUTH:
            self.ui.display_error(f"{error} (run 'learnassist login')")
        else:
            self.ui.display_error(f"{action} failed: {error}")

    def _progress(self, label: str):
        def on_update(update: TaskUpdate) -> None:
            self.ui.display_progress(update, label=label)
        return on_update

    # --- Account commands ---

    async def handle_login(self, username: str, password: str) -> bool:
        logger.info(f"Handling 'login' command for user: {username}")
        try:
            response = await self.auth_service.login(LoginRequest(username=username, password=password))
        except LearnAssistError as e:
            self._report("Login", e)
            return False
        self.ui.display_info(f"Logged in as {response.user.display_name or response.user.username}.")
        return True

    async def handle_register(
        self,
        username: str,
        password: str,
        confirm_password: str,
        display_name: str,
        email: Optional[str] = None,
        grade: Optional[str] = None,
        school: Optional[str] = None,
        favorite_subjects: Optional[List[str]] = None,
    ) -> bool:
        logger.info(f"Handling 'register' command for user: {username}")
        request = RegisterRequest(
            username=username,
            password=password,
            confirm_password=confirm_password,
            display_name=display_name,
            email=email,
            grade=grade,
            school=school,
            favorite_subjects=favorite_subjects or [],
        )
        try:
            response = await self.auth_service.register(request)
        except LearnAssistError as e:
            self._report("Registration", e)
            return False
        self.ui.display_info(f"Account created. Logged in as {response.user.username}.")
        return True

    async def handle_logout(self) -> bool:
        logger.info("Handling 'logout' command")
        try:
            await self.auth_service.logout()
        except LearnAssistError as e:
            self._report("Logout", e)
            return False
        self.ui.display_info("Logged out.")
        return True

    async def handle_whoami(self) -> bool:
        logger.info("Handling 'whoami' command")
        try:
            if not await self.auth_service.is_authenticated():
                self.ui.display_warning("Not logged in.")
                return False
            user = await self.auth_service.get_current_user()
        except LearnAssistError as e:
            self._report("Fetching profile", e)
            return False
        lines = [
            f"**{user.display_name}** (`{user.username}`, {user.role})",
            f"- Email: {user.email or '-'}",
            f"- Grade: {user.grade or '-'}",
            f"- School: {user.school or '-'}",
        ]
        if user.favorite_subjects:
            lines.append(f"- Favorite subjects: {', '.join(user.favorite_subjects)}")
        self.ui.display_output("\n".join(lines), title="Profile")
        return True

    # --- Question commands ---

    async def _recognise(self, image_path: str, cancel_token: Optional[CancellationToken]) -> OCRResult:
        upload = await self.image_service.upload_image(image_path, cancel_token=cancel_token)
        self.ui.display_info(f"Image uploaded, OCR task {upload.task_id} started.")
        return await self.image_service.poll_ocr_result(
            upload.task_id, on_update=self._progress("OCR"), cancel_token=cancel_token
        )

    async def _solve(self, request: QuestionAnalysisRequest, cancel_token: Optional[CancellationToken]) -> None:
        task_id = await self.analysis_service.analyze_question(request, cancel_token=cancel_token)
        result = await self.analysis_service.poll_analysis_result(
            task_id, on_update=self._progress("Analysis"), cancel_token=cancel_token
        )
        self.ui.display_analysis(result)

    async def handle_ocr(self, image_path: str, cancel_token: Optional[CancellationToken] = None) -> bool:
        """Handles the 'ocr' command: upload an image and print the recognised text."""
        logger.info(f"Handling 'ocr' command for image: {image_path}")
        try:
            ocr_result = await self._recognise(image_path, cancel_token)
        except LearnAssistError as e:
            self._report("OCR", e)
            return False
        self.ui.display_ocr_result(ocr_result)
        return True

    async def handle_solve(
        self,
        image_path: str,
        subject_hint: Optional[str] = None,
        grade_hint: Optional[str] = None,
        user_note: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> bool:
        """Handles the 'solve' command: OCR an image, then analyse the recognised question."""
        logger.info(f"Handling 'solve' command for image: {image_path}")
        try:
            ocr_result = await self._recognise(image_path, cancel_token)
            self.ui.display_ocr_result(ocr_result)
            request = QuestionAnalysisRequest(
                ocr_result=ocr_result, subject_hint=subject_hint, grade_hint=grade_hint, user_note=user_note
            )
            await self._solve(request, cancel_token)
        except LearnAssistError as e:
            self._report("Solving", e)
            return False
        return True

    async def handle_analyze_text(
        self,
        text: str,
        subject_hint: Optional[str] = None,
        grade_hint: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> bool:
        """Handles the 'analyze' command for a question typed as text."""
        logger.info("Handling 'analyze' command for typed question")
        request = QuestionAnalysisRequest(
            ocr_result=OCRResult(text=text, confidence=1.0), subject_hint=subject_hint, grade_hint=grade_hint
        )
        try:
            await self._solve(request, cancel_token)
        except LearnAssistError as e:
            self._report("Analysis", e)
            return False
        return True

    async def handle_similar(self, question_id: str) -> bool:
        logger.info(f"Handling 'similar' command for question: {question_id}")
        try:
            questions = await self.analysis_service.get_similar_questions(QuestionId(question_id))
        except LearnAssistError as e:
            self._report("Fetching similar questions", e)
            return False
        if not questions:
            self.ui.display_info("No similar questions found.")
            return True
        lines = [f"{i}. {q.question_text} ({q.subject or '-'}, {q.difficulty})" for i, q in enumerate(questions, 1)]
        self.ui.display_output("\n".join(lines), title="Similar questions")
        return True

    async def handle_feedback(
        self, question_id: str, helpful: bool, rating: Optional[int] = None, comment: Optional[str] = None
    ) -> bool:
        logger.info(f"Handling 'feedback' command for question: {question_id}")
        feedback = QuestionFeedback(is_helpful=helpful, rating=rating, comment=comment)
        try:
            await self.analysis_service.submit_feedback(QuestionId(question_id), feedback)
        except LearnAssistError as e:
            self._report("Submitting feedback", e)
            return False
        self.ui.display_info("Thanks for your feedback.")
        return True

    async def handle_clear_cache(self) -> bool:
        """Handles the 'clear-cache' command."""
        logger.info("Handling 'clear-cache' command")
        await self.api_client.clear_cache()
        self.ui.display_info("Response cache cleared.")
        return True
