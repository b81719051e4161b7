from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator


class CartOption(BaseModel):
    code: str
    value: str


class CartItem(BaseModel):
    """
    Article configuré du panier tel qu'envoyé par le front.
    - qty: entier >= 1
    - unitPriceCents: entier strictement positif (centimes)
    - currency: code ISO 3 lettres en majuscules
    """
    model_config = ConfigDict(populate_by_name=True)

    product_name: StrictStr = Field(alias="productName", min_length=1)
    base_sku: Optional[str] = Field(default=None, alias="baseSku")
    part_number: StrictStr = Field(alias="partNumber", min_length=1)
    qty: StrictInt = Field(ge=1)
    options: List[CartOption] = Field(default_factory=list)
    unit_price_cents: StrictInt = Field(alias="unitPriceCents", gt=0)
    currency: StrictStr
    notes: Optional[str] = None

    @field_validator("base_sku", "notes", mode="before")
    @classmethod
    def _ignore_non_string(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) else None

    @field_validator("options", mode="before")
    @classmethod
    def _keep_valid_options(cls, v: Any) -> List[dict]:
        # Options malformées ignorées silencieusement
        if not isinstance(v, list):
            return []
        return [
            {"code": o["code"], "value": o["value"]}
            for o in v
            if isinstance(o, dict) and isinstance(o.get("code"), str) and isinstance(o.get("value"), str)
        ]

    @field_validator("currency")
    @classmethod
    def _uppercase_iso(cls, v: str) -> str:
        if len(v) != 3:
            raise ValueError("currency must be a 3-letter code for each item")
        if v.upper() != v:
            raise ValueError("currency must be uppercase 3-letter code")
        return v

    def same_configuration(self, other: "CartItem") -> bool:
        """Même partNumber, mêmes notes (absent == vide), mêmes options dans le même ordre."""
        if self.part_number != other.part_number:
            return False
        if (self.notes or "") != (other.notes or ""):
            return False
        if len(self.options) != len(other.options):
            return False
        return all(a.code == b.code and a.value == b.value for a, b in zip(self.options, other.options))


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_email: StrictStr = Field(alias="customerEmail", min_length=1)
    items: List[CartItem] = Field(min_length=1)
    locale: Optional[str] = None

    @field_validator("locale", mode="before")
    @classmethod
    def _ignore_non_string_locale(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) else None
