"""Server configuration."""
import logging
import os
from typing import Optional

from pydantic import BaseModel, field_validator

from .jsonrpc.models import ErrorCode


class ServerConfig(BaseModel):
    """Settings for a JSON-RPC handler instance."""

    namespace_separator: str = "."
    registered_error_code: int = ErrorCode.SERVER_ERROR
    log_level: str = "INFO"

    @field_validator("namespace_separator")
    @classmethod
    def _single_character(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError("namespace_separator must be exactly one character")
        return value

    @field_validator("registered_error_code")
    @classmethod
    def _server_error_range(cls, value: int) -> int:
        if not ErrorCode.SERVER_ERROR_MIN <= value <= ErrorCode.SERVER_ERROR_MAX:
            raise ValueError(
                f"registered_error_code must be within "
                f"{ErrorCode.SERVER_ERROR_MIN}..{ErrorCode.SERVER_ERROR_MAX}"
            )
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def from_env(cls, prefix: str = "JSONRPC_") -> "ServerConfig":
        """Build a config from environment variables, e.g. JSONRPC_LOG_LEVEL."""
        values = {}
        for name in cls.model_fields:
            raw: Optional[str] = os.getenv(f"{prefix}{name.upper()}")
            if raw is not None:
                values[name] = raw
        return cls(**values)
