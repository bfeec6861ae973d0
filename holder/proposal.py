"""
Proposal Builders

Helpers a holder uses to create fresh baskets and shape reorg proposals.
Every new basket gets its own random 32-byte salt, so two baskets with the
same token id and value still have unrelated hashes.
"""

from __future__ import annotations

import secrets
from typing import Iterable, Sequence

from core.crypto.commitment import SALT_SIZE
from core.crypto.hashing import to_hex
from core.schemas.basket import BasketData, BasketRecord, ReorgProposal
from core.schemas.errors import SchemaValidationException


def new_salt() -> str:
    return to_hex(secrets.token_bytes(SALT_SIZE))


def new_basket(token_id: int, value: int) -> BasketRecord:
    """A fresh basket record with a random salt."""
    data = BasketData(salt=new_salt(), token_id=token_id, value=value)
    return BasketRecord.from_data(data)


def split_basket(record: BasketRecord, values: Sequence[int]) -> ReorgProposal:
    """
    Split one basket into several of the same token id.

    Raises:
        SchemaValidationException: values do not sum to the basket's value
    """
    values = list(values)
    if not values:
        raise SchemaValidationException("split requires at least one output value", field_path="values")
    if sum(values) != record.data.value:
        raise SchemaValidationException(
            f"split values sum to {sum(values)}, basket holds {record.data.value}",
            field_path="values",
        )
    outputs = [new_basket(record.data.token_id, v) for v in values]
    return ReorgProposal(baskets_in=[record], baskets_out=outputs)


def merge_baskets(records: Iterable[BasketRecord]) -> ReorgProposal:
    """
    Merge baskets of one token id into a single basket.

    Raises:
        SchemaValidationException: no inputs, or inputs of mixed token ids
    """
    records = list(records)
    if not records:
        raise SchemaValidationException("merge requires at least one input", field_path="records")
    token_ids = {r.data.token_id for r in records}
    if len(token_ids) != 1:
        raise SchemaValidationException(
            f"cannot merge baskets of different token ids {sorted(token_ids)}",
            field_path="records",
        )
    total = sum(r.data.value for r in records)
    return ReorgProposal(baskets_in=records, baskets_out=[new_basket(token_ids.pop(), total)])


def build_proposal(
    baskets_in: Iterable[BasketRecord],
    outputs: Iterable[tuple[int, int]],
) -> ReorgProposal:
    """
    General reorg: spend the given inputs into fresh baskets.

    ``outputs`` is a sequence of (token_id, value) pairs. Conservation is
    not checked here; the oracles do that.
    """
    return ReorgProposal(
        baskets_in=list(baskets_in),
        baskets_out=[new_basket(token_id, value) for token_id, value in outputs],
    )
