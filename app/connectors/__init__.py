"""
app/connectors package marker.
"""

from app.connectors.published_sheet import PublishedSheetConnector, SheetFetchError

__all__ = [
    "PublishedSheetConnector",
    "SheetFetchError",
]
