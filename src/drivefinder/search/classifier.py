"""Drive item classification and icon selection."""

from __future__ import annotations

from enum import Enum

from drivefinder.search.models import DriveItemResult, IconKind, RenderedItem


class IconAsset(str, Enum):
    """Static visuals a front end needs to provide."""

    PLACEHOLDER = "placeholder"  # reserved for pending thumbnails
    FILE = "file"
    FOLDER = "folder"
    IMAGE = "image"


_ICONS: dict[IconKind, IconAsset] = {
    IconKind.FOLDER: IconAsset.FOLDER,
    IconKind.IMAGE: IconAsset.IMAGE,
    IconKind.FILE: IconAsset.FILE,
}


def classify(result: DriveItemResult) -> IconKind:
    # First match wins: a folder that also carries an image facet is a folder.
    if result.is_folder or result.is_special_folder:
        return IconKind.FOLDER
    if result.is_image:
        return IconKind.IMAGE
    return IconKind.FILE


def icon_for(kind: IconKind) -> IconAsset:
    return _ICONS[kind]


def render(result: DriveItemResult) -> RenderedItem:
    return RenderedItem(
        label=result.name,
        icon_kind=classify(result),
        web_url=result.web_url,
        size=result.size,
    )
