from typing import Optional

from apps.common.repository import GenericRepository
from .models import PageContent


class ContentRepository(GenericRepository[PageContent]):
    ordering = ("page",)

    def __init__(self):
        super().__init__(PageContent)

    def upsert(self, page: str, **data) -> PageContent:
        obj, _ = self.model.objects.update_or_create(page=page, defaults=data)
        return obj

    def for_page(self, page: str) -> Optional[PageContent]:
        return self.get(page=page)
