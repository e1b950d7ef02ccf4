"""Envbaker - multi-environment project skeleton scaffolder.

Copies one source directory into SANDBOX/DEV/STAGE/PREPROD/PROD environment
directories concurrently and optionally provisions a GitHub repository for
each copy.
"""

import logging

from .cli import main
from .copying import CompletionBarrier, copy_to_many, copy_tree
from .core.errors import CopyError, CopyErrorKind
from .core.models import CopyResult
from .workspace.layout import ENVIRONMENT_PREFIXES

__version__ = "0.1.0"

logging.getLogger("envbaker").addHandler(logging.NullHandler())

__all__ = [
    "ENVIRONMENT_PREFIXES",
    "CompletionBarrier",
    "CopyError",
    "CopyErrorKind",
    "CopyResult",
    "copy_to_many",
    "copy_tree",
    "main",
]
