from typing import Any, Dict, Optional, Protocol

from .dtos import PaymentIntentRecord


class PaymentGatewayProtocol(Protocol):
    def create_intent(
        self,
        *,
        amount: int,
        currency: str,
        metadata: Dict[str, str],
        shipping: Optional[Dict[str, Any]] = None,
        receipt_email: Optional[str] = None,
    ) -> PaymentIntentRecord: ...

    def retrieve_intent(self, intent_id: str) -> PaymentIntentRecord: ...
