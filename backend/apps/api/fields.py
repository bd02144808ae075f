from decimal import ROUND_HALF_UP, Decimal

from rest_framework import serializers


class RoundedDecimalField(serializers.DecimalField):
    """Money input that rounds extra decimal places instead of rejecting them.

    ``37.480000000000004`` (a float sum of 9.99, 14.99 and 12.5) becomes ``37.48``.
    """

    def __init__(self, **kwargs):
        kwargs.setdefault("max_digits", 10)
        kwargs.setdefault("decimal_places", 2)
        kwargs.setdefault("coerce_to_string", False)
        kwargs.setdefault("rounding", ROUND_HALF_UP)
        super().__init__(**kwargs)

    def validate_precision(self, value):
        if value.is_finite():
            value = value.quantize(Decimal(1).scaleb(-self.decimal_places), rounding=self.rounding)
        return super().validate_precision(value)
