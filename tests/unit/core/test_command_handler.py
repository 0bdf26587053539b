import pytest
from unittest.mock import MagicMock

from learnassist.core.api_client import ApiClient
from learnassist.core.command_handler import CommandHandler
from learnassist.core.services.analysis_service import AnalysisService
from learnassist.core.services.auth_service import AuthService
from learnassist.core.services.image_service import ImageService
from learnassist.domain.interfaces.user_interface import UserInterface
from learnassist.domain.models.analysis import (
    ImageUploadResponse,
    OCRResult,
    QuestionAnalysisResult,
    QuestionFeedback,
)
from learnassist.domain.models.auth import AuthResponse, LoginRequest, UserProfile
from learnassist.domain.models.errors import AuthError, TaskTimeoutError, ValidationError

@pytest.fixture
def mock_auth_service():
    return MagicMock(spec=AuthService)

@pytest.fixture
def mock_image_service():
    return MagicMock(spec=ImageService)

@pytest.fixture
def mock_analysis_service():
    return MagicMock(spec=AnalysisService)

@pytest.fixture
def mock_api_client():
    return MagicMock(spec=ApiClient)

@pytest.fixture
def mock_ui():
    return MagicMock(spec=UserInterface)

@pytest.fixture
def command_handler(mock_auth_service, mock_image_service, mock_analysis_service, mock_api_client, mock_ui):
    """Fixture to create CommandHandler with mocked services."""
    return CommandHandler(
        auth_service=mock_auth_service,
        image_service=mock_image_service,
        analysis_service=mock_analysis_service,
        api_client=mock_api_client,
        ui=mock_ui,
    )

def make_user(**overrides):
    data = dict(id="1", username="mei", display_name="Mei")
    data.update(overrides)
    return UserProfile(**data)

async def test_handle_login(command_handler: CommandHandler, mock_auth_service: MagicMock, mock_ui: MagicMock):
    mock_auth_service.login.return_value = AuthResponse(token="t", user=make_user())
    assert await command_handler.handle_login("mei", "pw") is True
    mock_auth_service.login.assert_awaited_once_with(LoginRequest(username="mei", password="pw"))
    mock_ui.display_info.assert_called_once_with("Logged in as Mei.")

async def test_handle_login_error(command_handler: CommandHandler, mock_auth_service: MagicMock, mock_ui: MagicMock):
    mock_auth_service.login.side_effect = ValidationError("Username and password are required")
    assert await command_handler.handle_login("", "") is False
    mock_ui.display_error.assert_called_once_with("Login failed: Username and password are required")

async def test_auth_errors_suggest_login(command_handler: CommandHandler, mock_auth_service: MagicMock, mock_ui: MagicMock):
    mock_auth_service.is_authenticated.return_value = True
    mock_auth_service.get_current_user.side_effect = AuthError()
    assert await command_handler.handle_whoami() is False
    message = mock_ui.display_error.call_args[0][0]
    assert "learnassist login" in message

async def test_handle_whoami_not_logged_in(command_handler: CommandHandler, mock_auth_service: MagicMock, mock_ui: MagicMock):
    mock_auth_service.is_authenticated.return_value = False
    assert await command_handler.handle_whoami() is False
    mock_ui.display_warning.assert_called_once_with("Not logged in.")
    mock_auth_service.get_current_user.assert_not_called()

async def test_handle_ocr(command_handler: CommandHandler, mock_image_service: MagicMock, mock_ui: MagicMock):
    ocr_result = OCRResult(text="2x = 4", confidence=0.8)
    mock_image_service.upload_image.return_value = ImageUploadResponse(task_id="ocr-1")
    mock_image_service.poll_ocr_result.return_value = ocr_result

    assert await command_handler.handle_ocr("/tmp/q.png") is True

    mock_image_service.upload_image.assert_awaited_once_with("/tmp/q.png", cancel_token=None)
    args, kwargs = mock_image_service.poll_ocr_result.call_args
    assert args == ("ocr-1",)
    assert callable(kwargs["on_update"])
    mock_ui.display_ocr_result.assert_called_once_with(ocr_result)

async def test_handle_solve_runs_ocr_then_analysis(
    command_handler: CommandHandler,
    mock_image_service: MagicMock,
    mock_analysis_service: MagicMock,
    mock_ui: MagicMock,
):
    ocr_result = OCRResult(text="2x = 4", confidence=0.8)
    analysis = QuestionAnalysisResult(question_id="q-1", question_text="2x = 4")
    mock_image_service.upload_image.return_value = ImageUploadResponse(task_id="ocr-1")
    mock_image_service.poll_ocr_result.return_value = ocr_result
    mock_analysis_service.analyze_question.return_value = "a-1"
    mock_analysis_service.poll_analysis_result.return_value = analysis

    assert await command_handler.handle_solve("/tmp/q.png", subject_hint="mathematics") is True

    request = mock_analysis_service.analyze_question.call_args[0][0]
    assert request.ocr_result is ocr_result
    assert request.subject_hint == "mathematics"
    assert mock_analysis_service.poll_analysis_result.call_args[0] == ("a-1",)
    mock_ui.display_analysis.assert_called_once_with(analysis)

async def test_handle_solve_timeout(command_handler: CommandHandler, mock_image_service: MagicMock, mock_ui: MagicMock):
    mock_image_service.upload_image.return_value = ImageUploadResponse(task_id="ocr-1")
    mock_image_service.poll_ocr_result.side_effect = TaskTimeoutError(task_id="ocr-1", attempts=10)
    assert await command_handler.handle_solve("/tmp/q.png") is False
    mock_ui.display_error.assert_called_once_with("Solving failed: Processing timed out, please try again")
    mock_ui.display_analysis.assert_not_called()

async def test_handle_analyze_text(command_handler: CommandHandler, mock_analysis_service: MagicMock):
    mock_analysis_service.analyze_question.return_value = "a-1"
    mock_analysis_service.poll_analysis_result.return_value = QuestionAnalysisResult(question_id="q", question_text="t")
    assert await command_handler.handle_analyze_text("What is 2 + 2?") is True
    request = mock_analysis_service.analyze_question.call_args[0][0]
    assert request.ocr_result.text == "What is 2 + 2?"

async def test_handle_similar_empty(command_handler: CommandHandler, mock_analysis_service: MagicMock, mock_ui: MagicMock):
    mock_analysis_service.get_similar_questions.return_value = []
    assert await command_handler.handle_similar("q-1") is True
    mock_ui.display_info.assert_called_once_with("No similar questions found.")

async def test_handle_feedback(command_handler: CommandHandler, mock_analysis_service: MagicMock):
    assert await command_handler.handle_feedback("q-1", helpful=False, rating=2, comment="unclear") is True
    mock_analysis_service.submit_feedback.assert_awaited_once_with(
        "q-1", QuestionFeedback(is_helpful=False, rating=2, comment="unclear")
    )

async def test_handle_clear_cache(command_handler: CommandHandler, mock_api_client: MagicMock, mock_ui: MagicMock):
    assert await command_handler.handle_clear_cache() is True
    mock_api_client.clear_cache.assert_awaited_once()
    mock_ui.display_info.assert_called_once_with("Response cache cleared.")

async def test_handle_logout(command_handler: CommandHandler, mock_auth_service: MagicMock, mock_ui: MagicMock):
    assert await command_handler.handle_logout() is True
    mock_auth_service.logout.assert_awaited_once()
