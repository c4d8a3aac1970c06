from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from thinktank.llm.models import SystemPrompt

DEFAULT_GROUP = "default"
DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful, accurate, and intelligent assistant. Provide clear, "
    "concise, and correct information. If you are unsure about something, "
    "admit it rather than making up an answer."
)


class ModelConfig(BaseModel):
    provider: str
    model_id: str
    enabled: bool = True
    api_key_env_var: str | None = None
    system_prompt: SystemPrompt | None = None
    options: dict[str, Any] = Field(default_factory=dict)

    @property
    def key(self) -> str:
        return f"{self.provider}:{self.model_id}"

    def same_model(self, other: "ModelConfig") -> bool:
        return self.provider == other.provider and self.model_id == other.model_id


class ModelGroup(BaseModel):
    name: str
    system_prompt: SystemPrompt = Field(
        default_factory=lambda: SystemPrompt(text=DEFAULT_SYSTEM_PROMPT)
    )
    models: list[ModelConfig] = []
    options: dict[str, Any] = Field(default_factory=dict)
    description: str | None = None


class AppConfig(BaseModel):
    models: list[ModelConfig] = []
    groups: dict[str, ModelGroup] = {}
    log_level: Literal["debug", "info", "warn", "error"] = "info"

    @model_validator(mode="before")
    @classmethod
    def _name_groups(cls, data: Any) -> Any:
        # Group names default to their mapping key.
        if isinstance(data, dict) and isinstance(data.get("groups"), dict):
            groups = {}
            for name, group in data["groups"].items():
                if isinstance(group, dict):
                    group = {"name": name, **group}
                groups[name] = group
            data = {**data, "groups": groups}
        return data

    @model_validator(mode="after")
    def _ensure_default_group(self) -> "AppConfig":
        if DEFAULT_GROUP not in self.groups:
            self.groups[DEFAULT_GROUP] = ModelGroup(
                name=DEFAULT_GROUP,
                system_prompt=SystemPrompt(
                    text=DEFAULT_SYSTEM_PROMPT,
                    metadata={"source": "default-config-normalization"},
                ),
                description="Default model group",
            )
        return self
