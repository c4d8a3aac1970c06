from .editor import add_model, edit_target, remove_model, set_model_enabled
from .loader import DEFAULT_CONFIG_TEMPLATE, find_config_path, load_config, user_config_path
from .lookup import (
    filter_models,
    find_model,
    find_model_group,
    get_api_key,
    get_enabled_group_models,
    get_enabled_models,
    get_group,
    parse_model_reference,
    validate_model_api_keys,
)
from .models import AppConfig, ModelConfig, ModelGroup

__all__ = [
    "AppConfig",
    "DEFAULT_CONFIG_TEMPLATE",
    "ModelConfig",
    "ModelGroup",
    "add_model",
    "edit_target",
    "filter_models",
    "find_config_path",
    "find_model",
    "find_model_group",
    "get_api_key",
    "get_enabled_group_models",
    "get_enabled_models",
    "get_group",
    "load_config",
    "parse_model_reference",
    "remove_model",
    "set_model_enabled",
    "user_config_path",
    "validate_model_api_keys",
]
