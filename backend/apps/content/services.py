from __future__ import annotations

import json
from typing import Any, Dict, Optional, Tuple

from apps.common import get_logger
from .dtos import ContentDTO
from .models import ContentPage, PageContent
from .protocols import ContentRepositoryProtocol

logger = get_logger(__name__).bind(component="content", layer="service")

ServiceError = Tuple[str, str, Optional[Any]]

ABOUT_STRING_FIELDS = (
    "heroImage",
    "myWhyTitle",
    "myWhyText1",
    "myWhyText2",
    "myWhyImage",
    "ourStoryTitle",
    "ourStoryText1",
    "ourStoryText2",
    "ourStoryImage",
    "signature",
    "signatureTitle",
    "builtForTitle",
)
ABOUT_LIST_FIELDS = ("builtForVideos",)


def parse_about(content: Any) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """Validate the structured About page; returns ``(data, error_message)``."""
    if isinstance(content, str):
        try:
            content = json.loads(content)
        except json.JSONDecodeError:
            return None, "About page content must be valid JSON"
    if not isinstance(content, dict):
        return None, "About page content must be a JSON object"
    required = ABOUT_STRING_FIELDS + ABOUT_LIST_FIELDS
    missing = [name for name in required if content.get(name) is None]
    if missing:
        return None, f"Missing required fields: {', '.join(missing)}"
    if not isinstance(content["builtForVideos"], list):
        return None, "builtForVideos must be an array"
    invalid = [name for name in ABOUT_STRING_FIELDS if not isinstance(content[name], str)]
    if invalid:
        return None, f"Invalid field types (must be strings): {', '.join(invalid)}"
    return content, None


class ContentService:
    def __init__(self, pages: ContentRepositoryProtocol):
        self.pages = pages
        self.logger = logger.bind(service="ContentService")

    @staticmethod
    def is_valid_page(page: str) -> bool:
        return page in ContentPage.values

    @staticmethod
    def _invalid_page(page: str) -> ServiceError:
        return ("INVALID_PAGE", f"Invalid page: {page}", {"validPages": list(ContentPage.values)})

    @staticmethod
    def _to_dto(obj: PageContent) -> ContentDTO:
        content: Any = obj.content
        if obj.page == ContentPage.ABOUT and content:
            try:
                content = json.loads(content)
            except json.JSONDecodeError:
                pass
        return ContentDTO(
            id=obj.page,
            page=obj.page,
            title=obj.title,
            content=content,
            document_url=obj.document_url or None,
            updated_by=str(obj.updated_by_id) if obj.updated_by_id else None,
            created_at=obj.created_at.isoformat() if obj.created_at else "",
            updated_at=obj.updated_at.isoformat() if obj.updated_at else "",
        )

    def get_page(self, page: str) -> Tuple[Optional[ContentDTO], Optional[ServiceError]]:
        if not self.is_valid_page(page):
            return None, self._invalid_page(page)
        obj = self.pages.for_page(page)
        if obj is None:
            self.logger.info("Content not found", page=page)
            return None, ("CONTENT_NOT_FOUND", f"Content not found for page: {page}", None)
        return self._to_dto(obj), None

    def update_page(
        self,
        page: str,
        content: Any,
        *,
        document_url: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> Tuple[Optional[ContentDTO], Optional[ServiceError]]:
        if not self.is_valid_page(page):
            return None, self._invalid_page(page)
        if content in (None, "", {}):
            return None, ("VALIDATION_ERROR", "Content is required", {"content": "required"})
        if page == ContentPage.ABOUT:
            data, problem = parse_about(content)
            if problem:
                self.logger.info("Rejected About page content", problem=problem)
                return None, ("VALIDATION_ERROR", problem, {"page": page})
            stored = json.dumps(data)
        elif isinstance(content, str):
            stored = content
        else:
            return None, ("VALIDATION_ERROR", "Content must be an HTML string", {"page": page})
        obj = self.pages.upsert(
            page,
            title=ContentPage(page).label,
            content=stored,
            document_url=document_url or "",
            updated_by_id=user_id,
        )
        self.logger.info("Content updated", page=page, user_id=user_id, length=len(stored))
        return self._to_dto(obj), None
