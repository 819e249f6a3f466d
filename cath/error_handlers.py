#!/usr/bin/env python3
"""
Error reporting for the CATH domain splitter.

Core functions raise CATHError subclasses; these helpers turn them into
exit codes and one-line messages at the command line, and into structured
log records inside the batch service.
"""
import sys
import traceback
import logging
from functools import wraps
from typing import Callable, TypeVar, Any, Dict, Optional, Union

from .exceptions import CATHError, ConfigurationError, FetchError, ParseError, ValidationError

T = TypeVar('T')

EXIT_INTERRUPTED = 130
EXIT_CATH_ERROR = 1
EXIT_UNEXPECTED = 2

# What to check next, shown with --verbose
HINTS = {
    ConfigurationError: "Check the configuration file and CATH_* environment variables",
    FetchError: "Check the boundary source path/URL, or pass --boundaries with a local copy",
    ParseError: "The boundary file is malformed; the line number is in the details",
    ValidationError: "Structure bookkeeping is inconsistent; please report this with the input file",
}


def _hint(error: CATHError) -> Optional[str]:
    for error_class, hint in HINTS.items():
        if isinstance(error, error_class):
            return hint
    return None


def format_error(error: Exception, verbose: bool = False) -> str:
    """Render an error for the terminal

    Args:
        error: Exception object
        verbose: Include details, hints and tracebacks

    Returns:
        Formatted message, one line unless verbose
    """
    if not isinstance(error, CATHError):
        if verbose:
            return f"Unexpected Error ({error.__class__.__name__}): {error}\n{traceback.format_exc()}"
        return f"Unexpected Error: {error}"

    lines = [f"{error.__class__.__name__}: {error.message}"]
    if verbose:
        if error.details:
            lines.append(f"Details: {error.details}")
        hint = _hint(error)
        if hint:
            lines.append(f"Hint: {hint}")
    return "\n".join(lines)


def handle_exceptions(exit_on_error: bool = False) -> Callable[[Callable[..., T]], Callable[..., Union[T, int]]]:
    """Decorator mapping exceptions raised by a command to exit codes

    CATHError gives 1, anything else 2, Ctrl-C 130.

    Args:
        exit_on_error: Call sys.exit with the code instead of returning it
    """
    def finish(code: int) -> int:
        if exit_on_error:
            sys.exit(code)
        return code

    def decorator(func: Callable[..., T]) -> Callable[..., Union[T, int]]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Union[T, int]:
            logger = logging.getLogger(func.__module__)
            try:
                return func(*args, **kwargs)
            except KeyboardInterrupt:
                logger.info("Split cancelled by user")
                print("\nCancelled", file=sys.stderr)
                return finish(EXIT_INTERRUPTED)
            except CATHError as e:
                logger.debug(f"{e.__class__.__name__} details: {e.details}")
                print(format_error(e, verbose=logger.isEnabledFor(logging.DEBUG)), file=sys.stderr)
                return finish(EXIT_CATH_ERROR)
            except Exception as e:
                logger.error(f"Unexpected error: {e}", exc_info=True)
                print(format_error(e), file=sys.stderr)
                print("Run with -vv for the full traceback.", file=sys.stderr)
                return finish(EXIT_UNEXPECTED)
        return wrapper
    return decorator


def cli_error_handler(func: Callable[..., T]) -> Callable[..., T]:
    """handle_exceptions that exits the process"""
    return handle_exceptions(exit_on_error=True)(func)


def log_exception(logger: logging.Logger,
                  error: Exception,
                  level: int = logging.ERROR,
                  context: Optional[Dict[str, Any]] = None) -> None:
    """Log an exception, merging its details with caller context

    Args:
        logger: Logger instance
        error: Exception object
        level: Logging level
        context: Extra fields, e.g. the structure id being split
    """
    if isinstance(error, CATHError):
        ctx = {**(error.details or {}), **(context or {})}
        logger.log(level, f"{error.__class__.__name__}: {error.message}",
                   extra={"context": ctx} if ctx else None)
    else:
        logger.log(level, f"Unexpected error: {error}",
                   extra={"context": context} if context else None,
                   exc_info=True)
