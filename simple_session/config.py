"""
Session Configuration — Validated, immutable cookie and timeout settings.

Accepts a configuration bag with the optional fields::

    name      (str)   session / cookie name
    secure    (bool)  send the cookie over HTTPS only
    httpOnly  (bool)  hide the cookie from client-side scripts
    sameSite  (str)   one of Strict, Lax, None
    timeout   (int)   seconds before the session identifier is rotated

Any present field with the wrong type aborts session construction with
:class:`~simple_session.exceptions.InvalidConfiguration`.
"""
import os
import logging
from typing import Any, Literal, Optional
from collections.abc import Mapping

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from .exceptions import InvalidConfiguration

logger = logging.getLogger("simple_session.config")

SameSite = Literal["Strict", "Lax", "None"]

_ENV_TRUE = ("1", "true", "yes", "on")

# pydantic error locations (field names or aliases) -> public field names
_PUBLIC_FIELDS = {
    "name": "name",
    "secure": "secure",
    "http_only": "httpOnly",
    "httpOnly": "httpOnly",
    "same_site": "sameSite",
    "sameSite": "sameSite",
    "timeout": "timeout",
    "timeOut": "timeout",
}


class SessionConfig(BaseModel):
    """Validated session configuration."""

    name: Optional[str] = None
    secure: bool = True
    http_only: bool = Field(
        default=True,
        validation_alias=AliasChoices("httpOnly", "http_only"),
    )
    same_site: SameSite = Field(
        default="Strict",
        validation_alias=AliasChoices("sameSite", "same_site"),
    )
    timeout: int = Field(
        default=3600,
        ge=0,
        validation_alias=AliasChoices("timeout", "timeOut"),
    )

    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")

    @field_validator("same_site", mode="before")
    @classmethod
    def normalize_same_site(cls, v: Any) -> Any:
        """Accept any casing of the SameSite attribute."""
        if isinstance(v, str):
            return v.capitalize()
        return v

    @classmethod
    def from_env(cls) -> "SessionConfig":
        """Create SessionConfig from SESSION_* environment variables.

        Returns:
            Populated SessionConfig instance.

        Raises:
            InvalidConfiguration: If a variable holds an invalid value.
        """
        data: dict[str, Any] = {}
        if "SESSION_NAME" in os.environ:
            data["name"] = os.environ["SESSION_NAME"]
        for env, field in (
            ("SESSION_SECURE", "secure"),
            ("SESSION_HTTPONLY", "httpOnly"),
        ):
            if env in os.environ:
                data[field] = os.environ[env].strip().lower() in _ENV_TRUE
        if "SESSION_SAMESITE" in os.environ:
            data["sameSite"] = os.environ["SESSION_SAMESITE"]
        if "SESSION_TIMEOUT" in os.environ:
            try:
                data["timeout"] = int(os.environ["SESSION_TIMEOUT"])
            except ValueError as err:
                raise InvalidConfiguration(
                    "timeout", f"SESSION_TIMEOUT must be an integer: {err}"
                ) from err
        return validate_config(data)


def _as_mapping(config: Any) -> dict[str, Any]:
    if isinstance(config, Mapping):
        data = dict(config)
    elif hasattr(config, "__dict__"):
        data = dict(vars(config))
    else:
        raise InvalidConfiguration(
            "config",
            f"Session config must be a mapping or an object, got {type(config).__name__}",
        )
    # unset fields behave like absent ones
    return {k: v for k, v in data.items() if v is not None}


def validate_config(config: Any = None) -> SessionConfig:
    """Validate a configuration bag and return an immutable SessionConfig.

    Args:
        config: None, a mapping, an object with attributes or a SessionConfig.

    Returns:
        SessionConfig with defaults applied for absent fields.

    Raises:
        InvalidConfiguration: If a present field has the wrong type or value.
    """
    if isinstance(config, SessionConfig):
        return config
    data = _as_mapping(config) if config is not None else {}
    try:
        return SessionConfig.model_validate(data)
    except ValidationError as err:
        error = err.errors()[0]
        loc = error["loc"][0] if error["loc"] else "config"
        field = _PUBLIC_FIELDS.get(str(loc), str(loc))
        logger.debug("Rejected session config field %s: %s", field, error["msg"])
        raise InvalidConfiguration(
            field, f"Session config field '{field}' is invalid: {error['msg']}"
        ) from err
