"""depviz utilities package.

The error handler lives in depviz.utils.error_handler and is imported from
there directly; it depends on depviz.errors, which itself depends on this
package's exit codes.
"""

from .exit_codes import ExitCodes
from .logging import logger, new_run_id

__all__ = [
    "ExitCodes",
    "logger",
    "new_run_id",
]
