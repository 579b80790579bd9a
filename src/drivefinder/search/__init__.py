"""Drive search sessions: classification, result list, and the session controller."""

from drivefinder.search.classifier import IconAsset, classify, icon_for, render
from drivefinder.search.controller import CANCEL_LABEL, SEARCH_LABEL, SearchSessionController
from drivefinder.search.models import (
    DriveHandle,
    DriveItemResult,
    IconKind,
    RenderedItem,
    SearchOutcome,
    SearchReport,
    SearchSession,
    SearchState,
)
from drivefinder.search.protocol import DriveClient, SearchView
from drivefinder.search.results import ResultListManager

__all__ = [
    "CANCEL_LABEL",
    "SEARCH_LABEL",
    "DriveClient",
    "DriveHandle",
    "DriveItemResult",
    "IconAsset",
    "IconKind",
    "RenderedItem",
    "ResultListManager",
    "SearchOutcome",
    "SearchReport",
    "SearchSession",
    "SearchSessionController",
    "SearchState",
    "SearchView",
    "classify",
    "icon_for",
    "render",
]
