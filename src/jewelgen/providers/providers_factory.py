"""Factory for provider adapters."""

from __future__ import annotations

from ..config import GenerationConfig, ProviderFamily, ProviderSettings
from ..generation.polling import PollingEngine
from .providers_base import ProviderAdapter
from .providers_fal import AsyncPollAdapter
from .providers_openai import SyncJsonAdapter
from .providers_openai_edit import MultipartEditAdapter
from .providers_replicate import SyncWaitAdapter


def create_adapter(
    key: str, settings: ProviderSettings, config: GenerationConfig
) -> ProviderAdapter:
    """Instantiate the adapter for ``key`` according to its family."""
    api_key = config.resolve_credential(settings.credential)
    timeout = config.request_timeout_seconds
    params = dict(settings.params)

    if settings.family is ProviderFamily.SYNC_JSON:
        return SyncJsonAdapter(
            provider_key=key,
            api_url=settings.api_url,
            api_key=api_key,
            params=params,
            credential=settings.credential,
            timeout_seconds=timeout,
        )
    if settings.family is ProviderFamily.SYNC_WAIT:
        if not settings.model:
            raise ValueError(f"provider '{key}' requires a model")
        return SyncWaitAdapter(
            provider_key=key,
            api_url=settings.api_url,
            model=settings.model,
            api_key=api_key,
            params=params,
            credential=settings.credential,
            timeout_seconds=timeout,
        )
    if settings.family is ProviderFamily.ASYNC_POLL:
        if not settings.model:
            raise ValueError(f"provider '{key}' requires a model")
        return AsyncPollAdapter(
            provider_key=key,
            api_url=settings.api_url,
            model=settings.model,
            version=settings.version,
            api_key=api_key,
            params=params,
            credential=settings.credential,
            timeout_seconds=timeout,
            poller=PollingEngine(
                interval_seconds=config.poll_interval_seconds,
                max_polls=config.max_poll_attempts,
                deadline_seconds=config.poll_deadline_seconds,
            ),
        )
    if settings.family is ProviderFamily.MULTIPART_EDIT:
        return MultipartEditAdapter(
            provider_key=key,
            api_url=settings.api_url,
            api_key=api_key,
            params=params,
            system_prompt=settings.system_prompt,
            credential=settings.credential,
            timeout_seconds=timeout,
        )
    raise ValueError(f"Unsupported provider family '{settings.family}'")


def build_adapters(config: GenerationConfig) -> dict[str, ProviderAdapter]:
    """Build the lookup table of enabled adapters keyed by provider key."""
    return {
        key: create_adapter(key, settings, config)
        for key, settings in config.providers.items()
        if settings.enabled
    }
