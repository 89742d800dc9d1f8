from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from shopagent.apps.api import deps
from shopagent.core.cart.store import CartStore
from shopagent.core.catalog.schemas import Cart, CartItem, Product, User
from shopagent.core.gateway.gateway import ActionGateway
from shopagent.core.http import ShopAgentHTTPStatusError
from shopagent.core.models.chat import ChatMessage
from shopagent.core.models.llm_provider import LLMConfig, ShopAgentLLM
from shopagent.core.orchestration.action_client import ActionClient
from shopagent.core.orchestration.history import ConversationStore
from shopagent.core.orchestration.orchestrator import Orchestrator

SAMPLE_PRODUCTS = [
    {"id": 1, "title": "Fjallraven Backpack", "price": 109.95, "description": "Fits 15 inch laptops", "category": "men's clothing"},
    {"id": 2, "title": "Mens Casual Slim Fit T-Shirt", "price": 22.3, "description": "Slim-fitting style", "category": "men's clothing"},
    {"id": 3, "title": "John Hardy Chain Bracelet", "price": 695.0, "description": "Silver dragon station chain", "category": "jewelery"},
    {"id": 4, "title": "WD 2TB Portable Hard Drive", "price": 64.0, "description": "USB 3.0 external storage", "category": "electronics"},
    {"id": 5, "title": "Rain Jacket Windbreaker", "price": 39.99, "description": "Lightweight hooded jacket", "category": "women's clothing"},
]


class FakeCatalog:
    """In-memory upstream with switchable failures per method name."""

    def __init__(self, products: list[dict[str, Any]] | None = None) -> None:
        raw = SAMPLE_PRODUCTS if products is None else products
        self.products = [Product.model_validate(item) for item in raw]
        self.user_carts: dict[int, Cart] = {}
        self.failing: set[str] = set()
        self.calls: list[str] = []
        self.synced: list[tuple[int, list[CartItem]]] = []
        self.next_cart_id = 11

    def _enter(self, name: str) -> None:
        self.calls.append(name)
        if name in self.failing:
            raise ShopAgentHTTPStatusError(f"upstream {name} failed", status_code=503)

    async def aclose(self) -> None:
        return None

    async def login(self, username: str, password: str) -> str:
        self._enter("login")
        return f"token-{username}"

    async def get_profile(self, token: str) -> User:
        self._enter("get_profile")
        return User(id=1, email="john@example.com", username="johnd")

    async def get_products(self) -> list[Product]:
        self._enter("get_products")
        return list(self.products)

    async def get_product(self, product_id: int) -> Product:
        self._enter("get_product")
        for product in self.products:
            if product.id == product_id:
                return product
        raise ShopAgentHTTPStatusError(f"product {product_id} missing", status_code=404)

    async def get_categories(self) -> list[str]:
        self._enter("get_categories")
        return list(dict.fromkeys(product.category for product in self.products))

    async def get_user_cart(self, user_id: int) -> Cart:
        self._enter("get_user_cart")
        return self.user_carts.get(user_id) or Cart(user_id=user_id, products=[])

    async def create_cart(self, cart: Cart) -> Cart:
        self._enter("create_cart")
        created = cart.model_copy(update={"id": self.next_cart_id})
        self.next_cart_id += 1
        return created

    async def update_cart(self, cart_id: int, products: list[CartItem]) -> None:
        self._enter("update_cart")
        self.synced.append((cart_id, list(products)))

    async def delete_cart(self, cart_id: int) -> dict[str, object]:
        self._enter("delete_cart")
        return {"success": True, "message": "Cart deleted successfully"}


class ScriptedCompat:
    """Chat-completion stand-in that replays canned outputs and records prompts."""

    def __init__(self, outputs: list[str]) -> None:
        self.outputs = list(outputs)
        self.prompts: list[list[ChatMessage]] = []

    async def chat_completion(self, messages: list[ChatMessage], temperature: float, max_tokens: int | None = None) -> str:
        self.prompts.append(list(messages))
        if not self.outputs:
            raise AssertionError("no scripted output left")
        return self.outputs.pop(0)

    async def aclose(self) -> None:
        return None


def scripted_llm(outputs: list[str] | None) -> ShopAgentLLM:
    if outputs is None:
        config = LLMConfig(
            provider="off", model="test", url="http://llm.local", api_key=None,
            timeout_s=1.0, temperature=0.0, max_tokens=None,
        )
        return ShopAgentLLM(config=config, compat=ScriptedCompat([]))
    config = LLMConfig(
        provider="openai", model="test", url="http://llm.local", api_key="sk-test",
        timeout_s=1.0, temperature=0.0, max_tokens=None,
    )
    return ShopAgentLLM(config=config, compat=ScriptedCompat(outputs))


@dataclass
class Stack:
    catalog: FakeCatalog
    cart_store: CartStore
    gateway: ActionGateway
    actions: ActionClient
    llm: ShopAgentLLM
    conversations: ConversationStore
    orchestrator: Orchestrator


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    monkeypatch.setenv("SHOPAGENT_STATE_DIR", str(tmp_path))
    monkeypatch.setenv("SHOPAGENT_LLM_PROVIDER", "off")
    monkeypatch.delenv("SHOPAGENT_LLM_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("SHOPAGENT_HTTP_RETRIES", raising=False)
    monkeypatch.delenv("SHOPAGENT_LOG_TO_FILE", raising=False)
    monkeypatch.delenv("SHOPAGENT_LOG_DIR", raising=False)
    monkeypatch.delenv("SHOPAGENT_LOG_LEVEL", raising=False)
    deps.clear_caches()
    yield
    deps.clear_caches()


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def make_stack(catalog: FakeCatalog):
    def build(llm_outputs: list[str] | None = None, enrich_concurrency: int = 4) -> Stack:
        cart_store = CartStore(catalog)
        gateway = ActionGateway(catalog, cart_store)
        actions = ActionClient(gateway, enrich_concurrency=enrich_concurrency)
        llm = scripted_llm(llm_outputs)
        conversations = ConversationStore()
        orchestrator = Orchestrator(actions=actions, llm=llm, conversations=conversations)
        return Stack(catalog, cart_store, gateway, actions, llm, conversations, orchestrator)

    return build
