from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python; unknown upstream fields are dropped."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Rating(WireModel):
    rate: float = 0.0
    count: int = 0


class Product(WireModel):
    id: int
    title: str
    price: float
    description: str = ""
    category: str = ""
    image: str = ""
    rating: Rating = Field(default_factory=Rating)


class UserName(WireModel):
    firstname: str
    lastname: str


class Geolocation(WireModel):
    lat: str
    long: str


class Address(WireModel):
    city: str
    street: str
    number: int
    zipcode: str
    geolocation: Geolocation | None = None


class User(WireModel):
    id: int
    email: str
    username: str
    password: str | None = None
    name: UserName | None = None
    address: Address | None = None
    phone: str | None = None


class CartItem(WireModel):
    product_id: int
    quantity: int


class Cart(WireModel):
    id: int | None = None
    user_id: int
    date: str = Field(default_factory=utc_now_iso)
    products: list[CartItem] = Field(default_factory=list)
