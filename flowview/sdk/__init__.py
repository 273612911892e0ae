"""SDK for the pattern API and per-pattern views."""

from flowview.sdk.client import PatternClient
from flowview.sdk.view import PatternView, ViewSnapshot

__all__ = [
    "PatternClient",
    "PatternView",
    "ViewSnapshot",
]
