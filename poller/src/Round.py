"""Round: One normalized price observation read from an aggregator contract.

Rounds are produced once per successful fetch, never mutated, and handed to
a sink. The store sink persists them as CBOR, which keeps the full uint256
range of the timestamp fields intact.

.. code-block:: python

    >>> r = Round("ETH", round_id=10, answered_in_round=10,
    ...           started_at=1700000000, updated_at=1700000000, answer=2500.5)
    >>> Round.deserialize(r.serialize()) == r
    True
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

import cbor2

from .errors import DeserializeError

UINT128_MAX = 2**128 - 1
UINT256_MAX = 2**256 - 1

_INT_BOUNDS = {
    "round_id": UINT128_MAX,
    "answered_in_round": UINT128_MAX,
    "started_at": UINT256_MAX,
    "updated_at": UINT256_MAX,
}


@dataclass(frozen=True)
class Round:
    """Latest round data for one feed.

    :ivar identifier: Identifier of the feed the round belongs to.
    :ivar round_id: Id of the aggregator submission.
    :ivar answered_in_round: Round in which the answer was computed.
    :ivar started_at: Timestamp when the aggregator started the round.
    :ivar updated_at: Timestamp when the aggregator posted the answer.
    :ivar answer: Human-readable price (raw answer scaled by decimals).
    """

    identifier: str
    round_id: int
    answered_in_round: int
    started_at: int
    updated_at: int
    answer: float

    def __post_init__(self) -> None:
        """Range-check the integer fields."""
        for name, upper in _INT_BOUNDS.items():
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value < 0 or value > upper:
                raise ValueError(f"{name} out of range: {value}")

    def to_dict(self) -> dict[str, Any]:
        """Return the round as a plain dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Round:
        """Build a round from a mapping produced by :meth:`to_dict`.

        :param data: Mapping with all round fields.
        :returns: New Round instance.
        :raises KeyError: If a field is missing.
        :raises ValueError: If a field is out of range.
        """
        return cls(
            identifier=str(data["identifier"]),
            round_id=data["round_id"],
            answered_in_round=data["answered_in_round"],
            started_at=data["started_at"],
            updated_at=data["updated_at"],
            answer=float(data["answer"]),
        )

    def serialize(self) -> bytes:
        """Encode the round as CBOR bytes."""
        return cbor2.dumps(self.to_dict())

    @classmethod
    def deserialize(cls, payload: bytes) -> Round:
        """Decode CBOR bytes produced by :meth:`serialize`.

        :param payload: Encoded round.
        :returns: Decoded Round.
        :raises DeserializeError: If the bytes are not a valid round.
        """
        try:
            data = cbor2.loads(payload)
        except (cbor2.CBORDecodeError, ValueError, TypeError) as e:
            raise DeserializeError(f"Invalid CBOR payload: {e}") from e

        if not isinstance(data, dict):
            raise DeserializeError(f"Expected a map, got {type(data).__name__}")

        try:
            return cls.from_dict(data)
        except (KeyError, ValueError, TypeError) as e:
            raise DeserializeError(f"Invalid round data: {e}") from e
