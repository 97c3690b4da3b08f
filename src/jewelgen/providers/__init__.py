"""Adapters for third-party image generation backends."""

from .providers_base import ProviderAdapter
from .providers_fal import AsyncPollAdapter
from .providers_factory import build_adapters, create_adapter
from .providers_openai import SyncJsonAdapter
from .providers_openai_edit import MultipartEditAdapter
from .providers_replicate import SyncWaitAdapter

__all__ = [
    "ProviderAdapter",
    "AsyncPollAdapter",
    "MultipartEditAdapter",
    "SyncJsonAdapter",
    "SyncWaitAdapter",
    "build_adapters",
    "create_adapter",
]
