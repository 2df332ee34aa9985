"""Project-wide constants for the DeskTidy application.

Centralizes category tables and UI timings so the listing, the view and the
toolbar agree on them.
"""

# File categories (id, label, color, extensions)
CATEGORIES = [
    {
        "id": "images",
        "label": "Images",
        "color": "#e91e63",
        "extensions": [".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".bmp", ".ico", ".heic"],
    },
    {
        "id": "documents",
        "label": "Documents",
        "color": "#2196f3",
        "extensions": [".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx", ".txt", ".rtf", ".hwp"],
    },
    {
        "id": "videos",
        "label": "Videos",
        "color": "#8e44ad",
        "extensions": [".mp4", ".mov", ".avi", ".mkv", ".wmv", ".flv", ".webm"],
    },
    {
        "id": "music",
        "label": "Music",
        "color": "#10b981",
        "extensions": [".mp3", ".wav", ".flac", ".aac", ".m4a", ".ogg", ".wma"],
    },
    {
        "id": "archives",
        "label": "Archives",
        "color": "#f59e0b",
        "extensions": [".zip", ".rar", ".7z", ".tar", ".gz", ".bz2"],
    },
    {
        "id": "installers",
        "label": "Installers",
        "color": "#9c27b0",
        "extensions": [".exe", ".msi", ".dmg", ".pkg", ".deb", ".rpm", ".app"],
    },
    {
        "id": "code",
        "label": "Code",
        "color": "#26a0da",
        "extensions": [".js", ".ts", ".tsx", ".jsx", ".py", ".java", ".html", ".css", ".json", ".xml", ".yml", ".md"],
    },
    {
        "id": "others",
        "label": "Others",
        "color": "#7a7f8a",
        "extensions": [],
    },
]
"""Category definitions, matched in order by lower-cased extension"""

DEFAULT_CATEGORY = "others"
"""Category used when no extension table matches"""

DIRECTORY_CATEGORY = "folders"
"""Category reported for directory entries"""

# UI Configuration
TOOLBAR_ANIMATION_MS = 220
"""Duration of the selection toolbar slide/fade transition (milliseconds)"""

TOOLBAR_SLIDE_PX = 100
"""Vertical offset the selection toolbar slides in from"""

TOOLBAR_BOTTOM_MARGIN = 24
"""Gap between the floating toolbar and the bottom edge of its parent"""

TOAST_TIMEOUT_MS = 4000
"""Default time a notification stays on screen"""

ROW_SELECTED_COLOR = "#2d5a88"
"""Background for selected rows in the file list"""

DATE_FORMAT = "%Y-%m-%d %H:%M"
"""Display format for created/modified timestamps"""
