"""
hcp-render renders the Kubernetes manifests of a hosted control plane cluster from a library of templates, a cluster
configuration and the images and versions of an OpenShift release payload.
"""

import sys
from enum import Enum

from loguru import logger
from typer import Option

from hcp_render.tools.typer import new_typer

app = new_typer(help=__doc__)


from . import render  # noqa: F401,E402


class LogLevel(str, Enum):
    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@app.callback()
def _callback(
    log_level: LogLevel = Option(
        LogLevel.INFO, "--log-level", "-l", envvar="HCP_RENDER_LOG_LEVEL", help="The log level to use."
    ),
) -> None:
    logger.remove()
    logger.add(sys.stderr, level=log_level.name)
