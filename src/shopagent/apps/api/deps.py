from __future__ import annotations

from functools import lru_cache

from shopagent.core.cart.store import CartStore
from shopagent.core.catalog.client import CatalogClient
from shopagent.core.config import Settings
from shopagent.core.gateway.gateway import ActionGateway
from shopagent.core.models.llm_provider import ShopAgentLLM
from shopagent.core.orchestration.action_client import ActionClient
from shopagent.core.orchestration.history import ConversationStore
from shopagent.core.orchestration.orchestrator import Orchestrator


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


@lru_cache(maxsize=1)
def get_catalog_client() -> CatalogClient:
    settings = get_settings()
    return CatalogClient(settings.catalog_url, timeout_s=settings.http_timeout_s)


@lru_cache(maxsize=1)
def get_cart_store() -> CartStore:
    return CartStore(get_catalog_client())


@lru_cache(maxsize=1)
def get_gateway() -> ActionGateway:
    return ActionGateway(get_catalog_client(), get_cart_store())


@lru_cache(maxsize=1)
def get_action_client() -> ActionClient:
    return ActionClient(get_gateway(), enrich_concurrency=get_settings().cart_enrich_concurrency)


@lru_cache(maxsize=1)
def get_llm() -> ShopAgentLLM:
    return ShopAgentLLM()


@lru_cache(maxsize=1)
def get_orchestrator() -> Orchestrator:
    return Orchestrator(
        actions=get_action_client(),
        llm=get_llm(),
        conversations=ConversationStore(ttl_s=get_settings().session_ttl_s),
    )


def clear_caches() -> None:
    for provider in (
        get_orchestrator,
        get_llm,
        get_action_client,
        get_gateway,
        get_cart_store,
        get_catalog_client,
        get_settings,
    ):
        provider.cache_clear()
