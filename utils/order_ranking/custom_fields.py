# utils/order_ranking/custom_fields.py
"""
Custom Order Fields

Admins add extra inputs to the order form. Each definition is one of a
closed set of kinds, decoded from its database row once:

    TEXT      free text
    NUMBER    decimal number
    BOOLEAN   yes/no, stored as "true"/"false"
    DROPDOWN  one of an ordered list of options

Values are stored as text in order_custom_values; every field kind knows
how to parse form input and how to serialize it back.
"""

import json
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd

logger = logging.getLogger(__name__)


class FieldKind(str, Enum):
    TEXT = "TEXT"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    DROPDOWN = "DROPDOWN"


FIELD_KIND_LABELS = {
    FieldKind.TEXT: "Text",
    FieldKind.NUMBER: "Number",
    FieldKind.BOOLEAN: "Yes/No",
    FieldKind.DROPDOWN: "List",
}

_TRUE_VALUES = {'true', '1', 'yes', 'y', 'sim'}
_FALSE_VALUES = {'false', '0', 'no', 'n', 'nao', 'não'}


def _is_blank(raw: Any) -> bool:
    if raw is None:
        return True
    if isinstance(raw, str):
        return not raw.strip()
    try:
        return bool(pd.isna(raw))
    except (TypeError, ValueError):
        return False


@dataclass(frozen=True)
class TextField:
    id: int
    name: str
    is_active: bool = True
    kind = FieldKind.TEXT

    def parse(self, raw: Any) -> Optional[str]:
        if _is_blank(raw):
            return None
        return str(raw).strip()

    def serialize(self, value: Optional[str]) -> Optional[str]:
        return value


@dataclass(frozen=True)
class NumberField:
    id: int
    name: str
    is_active: bool = True
    kind = FieldKind.NUMBER

    def parse(self, raw: Any) -> Optional[Decimal]:
        if _is_blank(raw):
            return None
        try:
            number = Decimal(str(raw).strip())
        except InvalidOperation:
            raise ValueError(f"'{self.name}' must be a number")
        if not number.is_finite():
            raise ValueError(f"'{self.name}' must be a number")
        return number

    def serialize(self, value: Optional[Decimal]) -> Optional[str]:
        return None if value is None else str(value)


@dataclass(frozen=True)
class BooleanField:
    id: int
    name: str
    is_active: bool = True
    kind = FieldKind.BOOLEAN

    def parse(self, raw: Any) -> Optional[bool]:
        if isinstance(raw, bool):
            return raw
        if _is_blank(raw):
            return None
        text = str(raw).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise ValueError(f"'{self.name}' must be yes or no")

    def serialize(self, value: Optional[bool]) -> Optional[str]:
        if value is None:
            return None
        return "true" if value else "false"


@dataclass(frozen=True)
class DropdownField:
    id: int
    name: str
    options: Tuple[str, ...] = ()
    is_active: bool = True
    kind = FieldKind.DROPDOWN

    def parse(self, raw: Any) -> Optional[str]:
        if _is_blank(raw):
            return None
        value = str(raw).strip()
        if value not in self.options:
            raise ValueError(f"'{value}' is not an option of '{self.name}'")
        return value

    def serialize(self, value: Optional[str]) -> Optional[str]:
        return value


CustomField = Union[TextField, NumberField, BooleanField, DropdownField]


# =============================================================================
# OPTIONS
# =============================================================================

def parse_options(raw: Any) -> Tuple[str, ...]:
    """
    Normalize dropdown options into an ordered, de-duplicated tuple.

    Accepts a JSON array string (as stored), a list, or comma-separated
    text (as typed by an admin).
    """
    if isinstance(raw, (list, tuple)):
        items = raw
    elif _is_blank(raw):
        return ()
    else:
        text = str(raw).strip()
        items = None
        if text.startswith('['):
            try:
                decoded = json.loads(text)
                if isinstance(decoded, list):
                    items = decoded
            except json.JSONDecodeError:
                logger.warning(f"Dropdown options are not valid JSON, splitting on commas: {text!r}")
        if items is None:
            items = text.split(',')

    options: List[str] = []
    for item in items:
        option = str(item).strip()
        if option and option not in options:
            options.append(option)
    return tuple(options)


def encode_options(options: Iterable[str]) -> Optional[str]:
    options = list(options)
    return json.dumps(options, ensure_ascii=False) if options else None


# =============================================================================
# DECODING
# =============================================================================

def decode_field(row: Mapping) -> CustomField:
    """
    Build a typed field definition from a custom_fields row.

    Raises:
        ValueError: unknown field type
    """
    try:
        kind = FieldKind(str(row.get('type', '')).upper())
    except ValueError:
        raise ValueError(f"Unknown custom field type: {row.get('type')!r}")

    field_id = int(row['id'])
    name = str(row.get('name') or '')
    is_active = bool(row.get('is_active', True))

    if kind is FieldKind.TEXT:
        return TextField(field_id, name, is_active)
    if kind is FieldKind.NUMBER:
        return NumberField(field_id, name, is_active)
    if kind is FieldKind.BOOLEAN:
        return BooleanField(field_id, name, is_active)
    return DropdownField(field_id, name, parse_options(row.get('options')), is_active)


def fields_from_frame(df: pd.DataFrame) -> List[CustomField]:
    """Decode every well-formed row; malformed definitions are skipped."""
    if df is None or df.empty:
        return []

    fields = []
    for row in df.to_dict('records'):
        try:
            fields.append(decode_field(row))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Skipping custom field {row.get('id')}: {e}")
    return fields


def collect_values(
    fields: Iterable[CustomField],
    raw_values: Mapping[int, Any]
) -> Tuple[List[Tuple[int, Optional[str]]], List[str]]:
    """
    Parse raw form inputs against their field definitions.

    Returns:
        Tuple of ([(field_id, serialized value)], [error messages])
    """
    values = []
    errors = []

    for field in fields:
        try:
            parsed = field.parse(raw_values.get(field.id))
        except ValueError as e:
            errors.append(str(e))
            continue
        values.append((field.id, field.serialize(parsed)))

    return values, errors
