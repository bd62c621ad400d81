"""Validation helpers shared by settings and request models."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic_settings import EnvSettingsSource

if TYPE_CHECKING:
    from pydantic.fields import FieldInfo


def _json_string_list(text: str) -> list[str]:
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON array: {e}") from e
    if not isinstance(parsed, list) or any(not isinstance(item, str) for item in parsed):
        raise ValueError("JSON value must be an array of strings")
    return parsed


def parse_string_list(value: str | list[str], *, allow_empty: bool = False) -> list[str]:
    """Read a list of strings from a list, a JSON array string or a comma-separated string.

    A blank string is always rejected; an empty result only when ``allow_empty`` is False.
    """
    if isinstance(value, list):
        items = value
    else:
        text = value.strip()
        if not text:
            raise ValueError("String list value must not be empty")
        if text.startswith("["):
            items = _json_string_list(text)
        else:
            items = [part.strip() for part in text.split(",") if part.strip()]

    if not items and not allow_empty:
        raise ValueError("String list value must not be empty")
    return items


class StringListEnvSettingsSource(EnvSettingsSource):
    """Env source that hands string-list fields to their validators undecoded.

    pydantic-settings would otherwise JSON-decode list fields itself and reject
    the comma-separated form.
    """

    string_list_fields: ClassVar[frozenset[str]] = frozenset({"cors_origins"})

    def prepare_field_value(
        self,
        field_name: str,
        field: FieldInfo,
        value: Any,  # noqa: ANN401
        value_is_complex: bool,  # noqa: FBT001
    ) -> Any:  # noqa: ANN401
        if isinstance(value, str) and field_name in self.string_list_fields:
            return value
        return super().prepare_field_value(field_name, field, value, value_is_complex)


_MAX_NAME_LENGTH = 50
_SPACE_ORD = 0x20
_DEL_ORD = 0x7F


def normalize_player_name(value: str) -> str:
    """Strip surrounding whitespace and reject blank, overlong or control-character names."""
    name = value.strip()
    if not name:
        raise ValueError("Player name is required")
    if len(name) > _MAX_NAME_LENGTH:
        raise ValueError(f"Player name must be at most {_MAX_NAME_LENGTH} characters")
    if any(ord(c) < _SPACE_ORD or ord(c) == _DEL_ORD for c in name):
        raise ValueError("Player name must not contain control characters")
    return name


def normalize_game_code(value: str) -> str:
    """Game codes are matched case-insensitively; stored codes are uppercase."""
    code = value.strip().upper()
    if not code.isalpha():
        raise ValueError("Game code must contain letters only")
    return code
