from __future__ import annotations

from .repositories import ContentRepository
from .services import ContentService


def build_content_service() -> ContentService:
    return ContentService(pages=ContentRepository())
