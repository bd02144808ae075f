from typing import Optional, Protocol

from .models import PageContent


class ContentRepositoryProtocol(Protocol):
    def for_page(self, page: str) -> Optional[PageContent]: ...

    def upsert(self, page: str, **data) -> PageContent: ...
