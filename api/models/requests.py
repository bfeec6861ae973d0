"""
Module 09D - API Request Models

The request body of POST /reorg is the proposal wire format itself:

    {"in":  [{"basket": H, "data": {"salt": S, "tokenId": T, "value": V}}, ...],
     "out": [...]}
"""

from pydantic import ConfigDict

from core.schemas.basket import BasketRecord, ReorgProposal


class ReorgRequest(ReorgProposal):
    """Request body for POST /reorg and POST /reorg/evaluate."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "in": [
                    {
                        "basket": "0x" + "00" * 32,
                        "data": {"salt": "0x" + "11" * 32, "tokenId": 1, "value": 100},
                    }
                ],
                "out": [],
            }
        },
    )

    def to_proposal(self) -> ReorgProposal:
        return ReorgProposal(baskets_in=self.baskets_in, baskets_out=self.baskets_out)


__all__ = ["BasketRecord", "ReorgRequest"]
