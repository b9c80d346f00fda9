"""CLI commands for the Octane bug tracker."""

from .bug import comment, file_bug, reopen, status
from .params import params

__all__ = ['comment', 'file_bug', 'params', 'reopen', 'status']
