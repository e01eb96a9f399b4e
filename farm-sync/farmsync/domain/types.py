# farmsync/domain/types.py
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, BeforeValidator, PlainSerializer, StringConstraints
from pydantic.alias_generators import to_camel

from farmsync.core.time_utils import to_utc_iso, to_utc_naive

CENTS = Decimal("0.01")


def to_money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def _id_to_str(value: Any) -> Any:
    # Clients may send integer ids; they are stored and returned as strings.
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


# Fixed-point, 2 decimal places; emitted as a JSON number.
Money = Annotated[
    Decimal,
    AfterValidator(to_money),
    PlainSerializer(float, return_type=float, when_used="json"),
]

# Accepts ISO-8601 strings or epoch seconds / milliseconds; stored UTC-naive.
Timestamp = Annotated[
    datetime,
    AfterValidator(to_utc_naive),
    PlainSerializer(to_utc_iso, return_type=str, when_used="json"),
]

Identifier = Annotated[
    str,
    BeforeValidator(_id_to_str),
    StringConstraints(min_length=1, max_length=255),
]


class CamelModel(BaseModel):
    """Wire models use camelCase keys; Python code uses snake_case."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
