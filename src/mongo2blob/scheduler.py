"""Azure Functions timer adapter.

Registers the export as a timer-triggered function firing every minute. The
adapter stamps the invocation and hands it to the pipeline, which converts
every failure into a returned result, so the handler never raises.
"""

import logging
from collections.abc import Callable
from typing import Any, Optional

import azure.functions as func

from .domain.models import ExportResult
from .pipeline.export import run_export_from_env
from .utils import utc_timestamp

logger = logging.getLogger(__name__)

# Six-field NCRONTAB: second minute hour day month day-of-week
EXPORT_SCHEDULE = "0 */1 * * * *"
FUNCTION_NAME = "timerTrigger1"


def run_scheduled_export(
    timer: Optional[Any] = None,
    runner: Callable[[str], ExportResult] = run_export_from_env,
) -> ExportResult:
    """
    Handle one timer tick.

    Args:
        timer: TimerRequest supplied by the Functions host, if any
        runner: Export entry point taking the invocation timestamp

    Returns:
        The completed ExportResult
    """
    timestamp = utc_timestamp()
    logger.info(f"Timer function processed request: {timestamp}")
    if timer is not None and getattr(timer, "past_due", False):
        logger.warning("Timer is past due; running the missed export now")

    result = runner(timestamp)
    logger.info(f"Scheduled export finished: {result.summary()}")
    return result


def create_function_app() -> func.FunctionApp:
    """Build the Functions app with the export timer registered."""
    function_app = func.FunctionApp()

    @function_app.function_name(name=FUNCTION_NAME)
    @function_app.timer_trigger(schedule=EXPORT_SCHEDULE, arg_name="timer", run_on_startup=False, use_monitor=False)
    def export_timer(timer: func.TimerRequest) -> None:
        run_scheduled_export(timer)

    return function_app
