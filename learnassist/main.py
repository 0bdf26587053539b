"""Main entry point for the learnassist application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Coroutine, Dict, List, Optional

import typer
from typing_extensions import Annotated

# --- Core Layer ---
from learnassist.core.api_client import ApiClient
from learnassist.core.command_handler import CommandHandler
from learnassist.core.services.analysis_service import AnalysisService
from learnassist.core.services.auth_service import AuthService
from learnassist.core.services.image_service import ImageService
from learnassist.core.services.task_client import AsyncTaskClient

# --- Domain Layer ---
from learnassist.domain.interfaces.user_interface import UserInterface
from learnassist.domain.models.tasks import TaskKind

# --- Infrastructure Layer ---
# Config
from learnassist.infrastructure.config.settings import (
    get_api_base_url,
    get_cache_max_items,
    get_cache_ttl_seconds,
    get_config,
    get_max_upload_bytes,
    get_mock_delays,
    get_poll_settings,
    get_request_timeout,
    get_retry_settings,
    get_storage_dir,
    get_supported_image_types,
    get_token_storage_key,
    load_configuration,
    use_mock_data,
)
# UI
from learnassist.infrastructure.cli.display import ConsoleDisplay
# Transport, storage, cache
from learnassist.infrastructure.http.transport import HttpxTransport
from learnassist.infrastructure.storage.disk_store import DiskKeyValueStore
from learnassist.infrastructure.auth.token_store import PersistentTokenStore
from learnassist.infrastructure.cache.response_cache import InMemoryResponseCache
# Resilience
from learnassist.infrastructure.resilience.api_retry import ApiRetryService
# Data sources
from learnassist.infrastructure.auth.gateways import BackendAuthGateway, FixtureAuthGateway
from learnassist.infrastructure.tasks.backend_sources import BackendAnalysisSource, BackendOcrSource
from learnassist.infrastructure.tasks.fixture_sources import FixtureAnalysisSource, FixtureOcrSource
# Monitoring
from learnassist.infrastructure.monitoring.logger_setup import setup_logging

logger = logging.getLogger(__name__)

# --- Dependency Injection Container (Manual) ---

def create_dependencies(mock: Optional[bool] = None, ui: Optional[UserInterface] = None) -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root. Backend and fixture data sources are
    chosen here, once; nothing below this point knows which one it got.

    Args:
        mock: Force fixture (True) or backend (False) data; None reads USE_MOCK_DATA.
        ui: UserInterface to use instead of a ConsoleDisplay.
    """
    # 1. Load Configuration First
    load_configuration()
    setup_logging(
        log_level=get_config('logging.level', 'WARNING'),
        log_format=get_config('logging.format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
        log_file=get_config('logging.file'),
    )
    use_mock = use_mock_data() if mock is None else mock
    logger.info(f"Initializing application dependencies (mock data: {use_mock})...")

    dependencies: Dict[str, Any] = {}

    # 2. Instantiate Infrastructure Adapters
    dependencies['ui'] = ui or ConsoleDisplay()
    dependencies['storage'] = DiskKeyValueStore(get_storage_dir())
    dependencies['token_store'] = PersistentTokenStore(dependencies['storage'], get_token_storage_key())
    dependencies['cache'] = InMemoryResponseCache(
        ttl_seconds=get_cache_ttl_seconds(),
        max_items=get_cache_max_items(),
    )
    dependencies['transport'] = HttpxTransport(
        get_api_base_url(),
        token_store=dependencies['token_store'],
        timeout=get_request_timeout(),
    )
    max_retries, initial_backoff_s, backoff_factor = get_retry_settings()
    dependencies['api_retry_service'] = ApiRetryService(
        token_store=dependencies['token_store'],
        max_retries=max_retries,
        initial_backoff_s=initial_backoff_s,
        backoff_factor=backoff_factor,
    )
    dependencies['api_client'] = ApiClient(
        transport=dependencies['transport'],
        retry_service=dependencies['api_retry_service'],
        cache=dependencies['cache'],
        token_store=dependencies['token_store'],
        max_upload_bytes=get_max_upload_bytes(),
    )

    # 3. Select data sources (backend vs fixture)
    if use_mock:
        ocr_delay_s, analysis_delay_s = get_mock_delays()
        dependencies['ocr_source'] = FixtureOcrSource(delay_s=ocr_delay_s)
        dependencies['analysis_source'] = FixtureAnalysisSource(delay_s=analysis_delay_s)
        dependencies['auth_gateway'] = FixtureAuthGateway()
    else:
        dependencies['ocr_source'] = BackendOcrSource(dependencies['api_client'])
        dependencies['analysis_source'] = BackendAnalysisSource(dependencies['api_client'])
        dependencies['auth_gateway'] = BackendAuthGateway(dependencies['api_client'])

    # 4. Instantiate Core Services (injecting dependencies)
    ocr_attempts, ocr_interval_s = get_poll_settings(TaskKind.OCR)
    dependencies['image_service'] = ImageService(
        source=dependencies['ocr_source'],
        task_client=AsyncTaskClient(dependencies['ocr_source']),
        supported_types=get_supported_image_types(),
        max_poll_attempts=ocr_attempts,
        poll_interval_s=ocr_interval_s,
    )
    analysis_attempts, analysis_interval_s = get_poll_settings(TaskKind.ANALYSIS)
    dependencies['analysis_service'] = AnalysisService(
        source=dependencies['analysis_source'],
        task_client=AsyncTaskClient(dependencies['analysis_source']),
        max_poll_attempts=analysis_attempts,
        poll_interval_s=analysis_interval_s,
    )
    dependencies['auth_service'] = AuthService(
        gateway=dependencies['auth_gateway'],
        api_client=dependencies['api_client'],
    )

    # 5. Instantiate Command Handler
    dependencies['command_handler'] = CommandHandler(
        auth_service=dependencies['auth_service'],
        image_service=dependencies['image_service'],
        analysis_service=dependencies['analysis_service'],
        api_client=dependencies['api_client'],
        ui=dependencies['ui'],
    )
    logger.info("All dependencies initialized successfully.")
    return dependencies

# --- Typer App Definition ---
app = typer.Typer(
    name="learnassist",
    help="learnassist: photograph a question, get the recognised text and a step-by-step solution.",
    add_completion=False,
)

# --- Helper for Running Async Commands ---
def run_async(dependencies: Dict[str, Any], coro: Coroutine[Any, Any, bool]) -> bool:
    """Runs a handler coroutine to completion, then releases network and disk resources."""
    async def _run() -> bool:
        try:
            return await coro
        finally:
            await dependencies['transport'].aclose()

    try:
        return asyncio.run(_run())
    except Exception as e:
        logger.error(f"Error executing async command: {e}", exc_info=True)
        dependencies['ui'].display_error(f"Command execution failed: {e}")
        return False
    finally:
        dependencies['storage'].close()

def _execute(ctx: typer.Context, coro_factory) -> None:
    dependencies: Dict[str, Any] = ctx.obj
    handler: CommandHandler = dependencies['command_handler']
    if not run_async(dependencies, coro_factory(handler)):
        raise typer.Exit(code=1)

# --- CLI Commands ---

SubjectOption = Annotated[Optional[str], typer.Option("--subject", "-s", help="Subject hint, e.g. 'mathematics'.")]
GradeOption = Annotated[Optional[str], typer.Option("--grade", "-g", help="Grade hint, e.g. 'Grade 10'.")]

@app.command()
def login(
    ctx: typer.Context,
    username: Annotated[str, typer.Option("--username", "-u", prompt=True, help="Account name.")],
    password: Annotated[str, typer.Option("--password", prompt=True, hide_input=True, help="Account password.")],
):
    """Log in and store the credential."""
    _execute(ctx, lambda handler: handler.handle_login(username, password))

@app.command()
def register(
    ctx: typer.Context,
    username: Annotated[str, typer.Option("--username", "-u", prompt=True)],
    display_name: Annotated[str, typer.Option("--display-name", prompt=True)],
    password: Annotated[str, typer.Option("--password", prompt=True, hide_input=True)],
    confirm_password: Annotated[str, typer.Option("--confirm-password", prompt=True, hide_input=True)],
    email: Annotated[Optional[str], typer.Option("--email")] = None,
    grade: Annotated[Optional[str], typer.Option("--grade")] = None,
    school: Annotated[Optional[str], typer.Option("--school")] = None,
    subjects: Annotated[Optional[List[str]], typer.Option("--subject", help="Favorite subject (repeatable).")] = None,
):
    """Create a student account and log in."""
    _execute(ctx, lambda handler: handler.handle_register(
        username, password, confirm_password, display_name,
        email=email, grade=grade, school=school, favorite_subjects=subjects,
    ))

@app.command()
def logout(ctx: typer.Context):
    """Forget the stored credential and cached responses."""
    _execute(ctx, lambda handler: handler.handle_logout())

@app.command()
def whoami(ctx: typer.Context):
    """Show the profile of the logged-in user."""
    _execute(ctx, lambda handler: handler.handle_whoami())

@app.command()
def ocr(
    ctx: typer.Context,
    image: Annotated[Path, typer.Argument(help="Question image (jpg, jpeg, png, heic).")],
):
    """Recognise the text of a question image."""
    _execute(ctx, lambda handler: handler.handle_ocr(str(image)))

@app.command()
def solve(
    ctx: typer.Context,
    image: Annotated[Path, typer.Argument(help="Question image (jpg, jpeg, png, heic).")],
    subject: SubjectOption = None,
    grade: GradeOption = None,
    note: Annotated[Optional[str], typer.Option("--note", help="Extra context for the solver.")] = None,
):
    """Recognise a question image, then produce a step-by-step solution."""
    _execute(ctx, lambda handler: handler.handle_solve(str(image), subject, grade, note))

@app.command()
def analyze(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="Question text.")],
    subject: SubjectOption = None,
    grade: GradeOption = None,
):
    """Produce a step-by-step solution for a typed question."""
    _execute(ctx, lambda handler: handler.handle_analyze_text(text, subject, grade))

@app.command()
def similar(
    ctx: typer.Context,
    question_id: Annotated[str, typer.Argument(help="Id of an analysed question.")],
):
    """List questions similar to an analysed one."""
    _execute(ctx, lambda handler: handler.handle_similar(question_id))

@app.command()
def feedback(
    ctx: typer.Context,
    question_id: Annotated[str, typer.Argument(help="Id of an analysed question.")],
    helpful: Annotated[bool, typer.Option("--helpful/--not-helpful", help="Was the solution helpful?")] = True,
    rating: Annotated[Optional[int], typer.Option("--rating", min=1, max=5, help="Rating from 1 to 5.")] = None,
    comment: Annotated[Optional[str], typer.Option("--comment")] = None,
):
    """Send feedback on an analysed question."""
    _execute(ctx, lambda handler: handler.handle_feedback(question_id, helpful, rating, comment))

@app.command(name="clear-cache")
def clear_cache_command(ctx: typer.Context):
    """Clears the response cache."""
    _execute(ctx, lambda handler: handler.handle_clear_cache())

@app.callback()
def main_callback(
    ctx: typer.Context,
    mock: Annotated[
        Optional[bool],
        typer.Option("--mock/--no-mock", help="Serve local fixture data instead of calling the backend.")
    ] = None,
):
    """Wires the dependencies for the invoked command."""
    if ctx.obj is None:
        ctx.obj = create_dependencies(mock=mock)

# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app() # Typer takes over

if __name__ == "__main__":
    cli_entry_point()
