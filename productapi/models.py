# productapi/models.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any


class ProductDraft(BaseModel):
    """A validated create payload, before the store assigns an id."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str = ""
    price: float
    category: str
    in_stock: bool = Field(default=True, alias="inStock")

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ProductDraft":
        return cls(
            name=payload["name"].strip(),
            description=(payload.get("description") or "").strip(),
            price=payload["price"],
            category=payload["category"].strip(),
            in_stock=payload.get("inStock", True),
        )


class Product(ProductDraft):
    id: int

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(by_alias=True)
        return {"id": data.pop("id"), **data}


class ProductUpdate(BaseModel):
    """Partial update: only the fields set on the instance are applied."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    in_stock: Optional[bool] = Field(default=None, alias="inStock")

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ProductUpdate":
        fields: Dict[str, Any] = {}
        for key in ("name", "description", "category"):
            if key in payload and payload[key] is not None:
                fields[key] = payload[key].strip()
        if "price" in payload:
            fields["price"] = payload["price"]
        if "inStock" in payload:
            fields["in_stock"] = payload["inStock"]
        return cls(**fields)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)
