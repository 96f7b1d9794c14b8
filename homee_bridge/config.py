"""Configuration schema for the homee bridge."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import voluptuous as vol

from .const import (
    CONF_ACCESS_TOKEN,
    CONF_HISTORY_TIMEOUT,
    CONF_HOST,
    CONF_LIMIT,
    CONF_NAMESPACE,
    CONF_PORT,
    DEFAULT_HISTORY_TIMEOUT,
    DEFAULT_LIMIT,
    DEFAULT_NAMESPACE,
    DEFAULT_PORT,
)


def _non_empty_str(value: Any) -> str:
    """Return ``value`` stripped, rejecting blank strings."""

    text = vol.Coerce(str)(value).strip()
    if not text:
        raise vol.Invalid("must not be empty")
    return text


CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_HOST): _non_empty_str,
        vol.Optional(CONF_PORT, default=DEFAULT_PORT): vol.All(
            vol.Coerce(int), vol.Range(min=1, max=65535)
        ),
        vol.Required(CONF_ACCESS_TOKEN): _non_empty_str,
        vol.Optional(CONF_NAMESPACE, default=DEFAULT_NAMESPACE): _non_empty_str,
        vol.Optional(CONF_LIMIT, default=DEFAULT_LIMIT): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
        vol.Optional(CONF_HISTORY_TIMEOUT, default=DEFAULT_HISTORY_TIMEOUT): vol.All(
            vol.Coerce(float), vol.Range(min=0, min_included=False)
        ),
    },
    extra=vol.REMOVE_EXTRA,
)


def validate_config(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Validate ``raw`` and return the normalised configuration mapping."""

    return CONFIG_SCHEMA(dict(raw))


__all__ = ["CONFIG_SCHEMA", "validate_config"]
