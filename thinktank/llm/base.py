"""Abstract LLM interface for thinktank."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod

from thinktank.errors.base import ApiError
from thinktank.errors.factories import (
    classify_provider_error,
    create_provider_api_key_missing_error,
)
from thinktank.llm.models import LLMAvailableModel, LLMResponse, ModelOptions, SystemPrompt


class LLMProvider(ABC):
    """Provider-agnostic interface for one LLM vendor.

    Construction is side-effect free: the vendor client is created lazily on
    the first ``generate`` or ``list_models`` call and cached on the instance.
    A changed API key needs a new instance.
    """

    provider_id: str = ""
    display_name: str = ""
    env_var: str = ""
    console_url: str = ""

    def __init__(self, api_key: str | None = None) -> None:
        self._api_key = api_key
        self._client = None

    def _resolve_api_key(self) -> str:
        """Return the constructor key, else the provider's environment variable."""
        api_key = self._api_key or os.environ.get(self.env_var)
        if not api_key:
            raise create_provider_api_key_missing_error(
                self.provider_id, self.display_name, self.console_url, self.env_var
            )
        return api_key

    def _classify(
        self, error: object, model_id: str | None = None, operation: str = "generate"
    ) -> ApiError:
        return classify_provider_error(
            self.provider_id,
            self.display_name,
            error,
            model_id,
            operation=operation,
            env_var=self.env_var,
        )

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        model_id: str,
        options: ModelOptions | None = None,
        system_prompt: SystemPrompt | None = None,
    ) -> LLMResponse:
        """Generate a complete response (one-shot)."""
        ...

    async def list_models(self, api_key: str | None = None) -> list[LLMAvailableModel]:
        """List the models the vendor exposes to this key."""
        raise NotImplementedError(f"{self.provider_id} does not support model listing")

    @property
    def supports_model_listing(self) -> bool:
        return type(self).list_models is not LLMProvider.list_models
