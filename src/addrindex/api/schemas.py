"""Request bodies of the POST routes."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field


class TxSendRequest(BaseModel):
    """Body of ``POST /tx/send``: a signed transaction in hex."""

    tx: str


class VerifyMessageRequest(BaseModel):
    """Body of ``POST /messages/verify``.

    ``bitcoinaddress`` is accepted as an alias of ``address``.
    """

    address: str = Field(validation_alias=AliasChoices("address", "bitcoinaddress"))
    signature: str
    message: str
