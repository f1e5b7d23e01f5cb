from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool


class Envelope(BaseModel):
    """
    Wrapper around every store response.

    Fields
    - result: the stored JSON value, left untyped until a caller asks for a
      concrete shape. Absent and null both mean "no value".
    - ok: store-reported success. When false, `result` carries no meaning.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    result: Any = Field(default=None, description="Stored JSON value or null")
    ok: StrictBool = Field(..., description="Store-reported success flag")

    @property
    def has_value(self) -> bool:
        return self.result is not None
