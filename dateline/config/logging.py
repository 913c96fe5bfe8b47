"""loguru setup for the backend clients and the CLI.

Each client logs under a dotted component name, and every record also
carries the external backend that component talks to, so a slow or failing
service can be picked out of a batch log:

    component               backend
    llm.research_oracle     perplexity
    llm.gemini              gemini
    sources.search          exa
    sources.encyclopedia    wikipedia

Validation and pipeline code log through structlog instead
(see ``dateline.utils.logging``).
"""

import sys
from loguru import logger

from dateline.config.settings import settings

COMPONENT_BACKENDS: dict[str, str] = {
    "llm.research_oracle": "perplexity",
    "llm.gemini": "gemini",
    "sources.search": "exa",
    "sources.encyclopedia": "wikipedia",
}
LOCAL_BACKEND = "local"

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> <dim>[{extra[backend]}]</dim> | <level>{message}</level>"
)


def configure_logging() -> None:
    """
    Install a single loguru sink from settings.

    Console format on an interactive terminal, one JSON object per record
    on stdout otherwise. Both honour LOG_LEVEL.
    """
    logger.remove()

    if sys.stderr.isatty() and settings.log_format.lower() == "console":
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=settings.log_level, colorize=True)
    else:
        logger.add(
            sys.stdout,
            format="{message}",
            level=settings.log_level,
            serialize=True,
            diagnose=False,
        )

    # unbound records still render with the console format
    logger.configure(extra={"component": "dateline", "backend": LOCAL_BACKEND})


def get_logger(component: str):
    """
    Logger bound to a component and the backend it calls.

    Components outside ``COMPONENT_BACKENDS`` (the CLI, for one) are tagged
    with ``LOCAL_BACKEND``.

    Example:
        >>> log = get_logger("sources.search")
        >>> log.info("Searching")  # extra: component=sources.search, backend=exa
    """
    backend = COMPONENT_BACKENDS.get(component, LOCAL_BACKEND)
    return logger.bind(component=component, backend=backend)


configure_logging()

__all__ = ["logger", "get_logger", "configure_logging", "COMPONENT_BACKENDS"]
