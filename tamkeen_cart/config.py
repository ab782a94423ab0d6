"""Runtime configuration for the storefront cart."""

import logging
import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CheckoutScope = Literal["separate", "combined"]


class StorefrontConfig(BaseModel):
    """Settings shared by the catalog caches, stores and checkout."""

    api_base_url: str = Field(default="https://api.tamkeen.center", description="Storefront API root")
    media_base_url: Optional[str] = Field(None, description="Root for image paths (defaults to the API root)")
    storage_dir: Path = Field(
        default_factory=lambda: Path.home() / ".tamkeen_cart",
        description="Directory holding the durable snapshots",
    )
    request_timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    checkout_scope: CheckoutScope = Field(
        default="separate",
        description="'separate' checks cart and basket out independently, 'combined' in one order",
    )
    min_search_length: int = Field(default=2, ge=0, description="Shortest term that produces suggestions")
    max_suggestions: int = Field(default=8, ge=1, description="Autocomplete result limit")

    @model_validator(mode="after")
    def _default_media_url(self) -> "StorefrontConfig":
        if self.media_base_url is None:
            self.media_base_url = self.api_base_url
        return self

    @classmethod
    def from_env(cls) -> "StorefrontConfig":
        """
        Build a configuration from environment variables.

        Environment variable mapping:
        - TAMKEEN_API_URL → api_base_url
        - TAMKEEN_MEDIA_URL → media_base_url
        - TAMKEEN_STORAGE_DIR → storage_dir
        - TAMKEEN_TIMEOUT → request_timeout
        - TAMKEEN_CHECKOUT_SCOPE → checkout_scope ("separate" or "combined")

        Unset variables keep their defaults.

        Raises:
            ConfigurationError: If a variable holds a value that does not validate
        """
        mapping = {
            "TAMKEEN_API_URL": "api_base_url",
            "TAMKEEN_MEDIA_URL": "media_base_url",
            "TAMKEEN_STORAGE_DIR": "storage_dir",
            "TAMKEEN_TIMEOUT": "request_timeout",
            "TAMKEEN_CHECKOUT_SCOPE": "checkout_scope",
        }
        values = {}
        for env_name, field_name in mapping.items():
            value = os.environ.get(env_name)
            if value:
                values[field_name] = value
                logger.debug(f"Loaded {field_name} from {env_name}")

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid storefront configuration: {e}") from e
