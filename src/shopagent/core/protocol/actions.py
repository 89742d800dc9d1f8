from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr, TypeAdapter
from pydantic.alias_generators import to_camel

from shopagent.core.catalog.schemas import Cart, CartItem, Product, User, WireModel


class ActionType(str, Enum):
    LOGIN = "login"
    GET_PRODUCTS = "getProducts"
    GET_PRODUCT = "getProduct"
    ADD_TO_CART = "addToCart"
    REMOVE_FROM_CART = "removeFromCart"
    GET_CART = "getCart"
    CREATE_CART = "createCart"
    UPDATE_CART = "updateCart"
    DELETE_CART = "deleteCart"
    GET_STORE_STATS = "getStoreStats"
    GET_AVAILABLE_OPTIONS = "getAvailableOptions"


CART_RESULT_ACTIONS = frozenset(
    {
        ActionType.ADD_TO_CART,
        ActionType.REMOVE_FROM_CART,
        ActionType.GET_CART,
        ActionType.CREATE_CART,
        ActionType.UPDATE_CART,
    }
)


class RequestPayload(BaseModel):
    """Inbound payloads reject unknown fields and loosely typed values."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class StrictCartItem(RequestPayload):
    product_id: StrictInt
    quantity: StrictInt

    def to_item(self) -> CartItem:
        return CartItem(product_id=self.product_id, quantity=self.quantity)


class LoginRequest(RequestPayload):
    username: StrictStr
    password: StrictStr


class GetProductRequest(RequestPayload):
    id: StrictInt


class AddToCartRequest(RequestPayload):
    product_id: StrictInt
    quantity: StrictInt


class RemoveFromCartRequest(RequestPayload):
    product_id: StrictInt


class CreateCartRequest(RequestPayload):
    user_id: StrictInt
    products: list[StrictCartItem]


class UpdateCartRequest(RequestPayload):
    cart_id: StrictInt
    products: list[StrictCartItem]


class DeleteCartRequest(RequestPayload):
    cart_id: StrictInt


class LoginResponse(WireModel):
    token: str
    user: User


class DeleteCartResponse(WireModel):
    success: bool
    message: str


class CategoryStats(WireModel):
    name: str
    product_count: int
    total_cost: float
    average_price: float


class StoreStats(WireModel):
    total_products: int
    total_cost: float
    average_price: float
    categories: list[CategoryStats]


class AvailableOptions(WireModel):
    available_actions: list[ActionType]
    product_categories: list[str]
    query_examples: list[str]


@dataclass(frozen=True)
class ActionSpec:
    request: TypeAdapter[Any] | None
    response: TypeAdapter[Any]


def _spec(request: Any, response: Any) -> ActionSpec:
    return ActionSpec(
        request=TypeAdapter(request) if request is not None else None,
        response=TypeAdapter(response),
    )


DISPATCH_TABLE: Mapping[ActionType, ActionSpec] = MappingProxyType(
    {
        ActionType.LOGIN: _spec(LoginRequest, LoginResponse),
        ActionType.GET_PRODUCTS: _spec(None, list[Product]),
        ActionType.GET_PRODUCT: _spec(GetProductRequest, Product),
        ActionType.ADD_TO_CART: _spec(AddToCartRequest, Cart),
        ActionType.REMOVE_FROM_CART: _spec(RemoveFromCartRequest, Cart),
        ActionType.GET_CART: _spec(None, Cart),
        ActionType.CREATE_CART: _spec(CreateCartRequest, Cart),
        ActionType.UPDATE_CART: _spec(UpdateCartRequest, Cart),
        ActionType.DELETE_CART: _spec(DeleteCartRequest, DeleteCartResponse),
        ActionType.GET_STORE_STATS: _spec(None, StoreStats),
        ActionType.GET_AVAILABLE_OPTIONS: _spec(None, AvailableOptions),
    }
)

_missing = [action.value for action in ActionType if action not in DISPATCH_TABLE]
if _missing:
    raise RuntimeError(f"dispatch table missing actions: {', '.join(_missing)}")


VOID_PAYLOAD_ACTIONS = frozenset(action for action, spec in DISPATCH_TABLE.items() if spec.request is None)


def is_void(action: ActionType) -> bool:
    return action in VOID_PAYLOAD_ACTIONS
