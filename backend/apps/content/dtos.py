from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class ContentDTO:
    id: str
    page: str
    title: str
    content: Any  # dict for the About page, HTML string otherwise
    document_url: Optional[str]
    updated_by: Optional[str]
    created_at: str
    updated_at: str
