"""Spanner client tuning.

Connection identity (project, instance, database, credentials) lives in
``ConnectionSettings``; this model only carries knobs for how reads are
issued.
"""

from __future__ import annotations

import os
from typing import Any, Optional

from pydantic import BaseModel, Field


class SpannerClientConfig(BaseModel):
    """Per-read options for the Spanner time-travel client.

    Example:
        >>> config = SpannerClientConfig()
        >>> config = SpannerClientConfig.with_env_overrides()
        >>> config = SpannerClientConfig(query_timeout_seconds=120)
    """

    query_timeout_seconds: float = Field(
        default=60.0,
        gt=0.0,
        le=3600.0,
        description="Deadline for a single query RPC",
    )
    session_pool_size: int = Field(
        default=1,
        ge=1,
        le=100,
        description="Sessions kept by the fixed-size pool; reads are sequential",
    )
    database_role: Optional[str] = Field(
        default=None,
        description="Fine-grained access control role used for reads",
    )

    model_config = {
        "validate_assignment": True,
        "extra": "forbid",
    }

    @classmethod
    def with_env_overrides(
        cls, base: Optional["SpannerClientConfig"] = None
    ) -> "SpannerClientConfig":
        """Create configuration with environment variable overrides.

        Environment variables:
        - SPANNER_PITR_QUERY_TIMEOUT: query_timeout_seconds
        - SPANNER_PITR_SESSION_POOL_SIZE: session_pool_size
        - SPANNER_PITR_DATABASE_ROLE: database_role
        """
        data: dict[str, Any] = {} if base is None else base.model_dump()

        env_mappings = {
            "SPANNER_PITR_QUERY_TIMEOUT": ("query_timeout_seconds", float),
            "SPANNER_PITR_SESSION_POOL_SIZE": ("session_pool_size", int),
            "SPANNER_PITR_DATABASE_ROLE": ("database_role", str),
        }

        for env_var, (field_name, converter) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                data[field_name] = converter(value)

        return cls.model_validate(data)
