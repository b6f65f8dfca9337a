import logging as root_logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

_SDK_LOGGER_NAME = "frodata"


def setup_sdk_logging(
    level="INFO",
    pretty: bool = False,
    console: Optional[Console] = None,
    propagate: bool = False,
):
    """
    Configures the global logging strategy for the FrOData SDK.

    This function initializes the 'frodata' logger namespace and provides two
    output modes: a 'pretty' mode rendered through Rich, and a standard
    stream mode for plain environments (CI logs, containers).
    Existing handlers are cleared, so calling it more than once never
    duplicates log entries.

    Args:
        level (str): The logging threshold (e.g., "DEBUG", "INFO", "WARNING").
            Defaults to "INFO".
        pretty (bool): If True, enables Rich terminal output with colors,
            timestamps, and formatted tracebacks.
        console (Optional[rich.console.Console]): An optional Rich Console
            instance, shared with any active Rich UI (progress bars, panels).
            Defaults to a new Console(stderr=True).
        propagate (bool): Whether records bubble up to the root logger.

    Notes:
        - Propagation is disabled by default to avoid duplicate output in
          test runners like pytest.
        - Request URLs are logged at DEBUG level; use "DEBUG" to trace every
          call sent to the OData service.
    """
    logger = root_logging.getLogger(_SDK_LOGGER_NAME)

    if logger.hasHandlers():
        logger.handlers.clear()

    if pretty:
        # --- RICH PATH ---
        console = console or Console(stderr=True)

        handler = RichHandler(
            level=level,
            console=console,
            show_time=True,
            show_path=True,
            markup=True,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        formatter = root_logging.Formatter(
            fmt="[dim white]%(name)s[/dim white]: %(message)s", datefmt="[%X]"
        )
        handler.setFormatter(formatter)
        init_message = f"SDK Logging initialized at level: [bold]{level}[/bold]"
        extra = {"markup": True}
    else:
        # --- STANDARD PATH ---
        handler = root_logging.StreamHandler(sys.stderr)
        formatter = root_logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        init_message = f"SDK Logging initialized at level: {level}"
        extra = {}

    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate

    logger.info(init_message, extra=extra)


def get_logger(name: Optional[str] = None):
    """
    Retrieves a logger instance within the FrOData SDK namespace.

    Args:
        name (Optional[str]): The name of the logger, typically `__name__`
            (e.g., 'frodata.comm.odata_service').
            If None, the top-level 'frodata' logger is returned.

    Returns:
        logging.Logger: A logger instance for the requested subsystem.
    """
    if name is not None:
        return root_logging.getLogger(name=name)
    else:
        return root_logging.getLogger(_SDK_LOGGER_NAME)
