from functools import wraps
import sys
import traceback

from dbsampler.common.errors import ErrorCode, classify_error
from dbsampler_cli.console import console, print_error


def handle_cli_errors(operation: str):
    """
    Decorator to wrap CLI commands with unified error handling.

    - Known failures (database, template, I/O, config): prints the classified error.
    - KeyboardInterrupt: Exits gracefully.
    - Unexpected Exception: Prints stack trace and error.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except KeyboardInterrupt:
                console.print("\n[warning]Operation cancelled by user.[/warning]")
                sys.exit(130)
            except Exception as e:
                error = classify_error(e, operation)
                if error.error_code == ErrorCode.UNKNOWN_ERROR:
                    print_error(f"Unexpected Error: {e}")
                    console.print(traceback.format_exc())
                else:
                    print_error(f"{error.error_code.value}: {error.get_safe_message()}")
                if error.is_retryable:
                    console.print("[dim]This error may be transient; retrying could succeed.[/dim]")
                sys.exit(1)

        return wrapper

    return decorator
