from typing import Any

from typer import Typer


def new_typer(**kwargs: Any) -> Typer:
    """
    Create a Typer application that shows its help when invoked without a command and leaves tracebacks of
    unexpected errors to the interpreter.
    """

    return Typer(no_args_is_help=True, pretty_exceptions_enable=False, **kwargs)
