"""Field transformation handlers."""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from dateutil import parser as date_parser

from ..exceptions import MappingError
from ..models.record import Record
from ..models.schema import HandlerConfig

logger = logging.getLogger(__name__)

# handler(record, opposite_record, field, params) -> None
HandlerFunc = Callable[[Record, Optional[Record], str, Dict[str, Any]], None]


class BoundHandler:
    """A handler function bound to one field and its parameters."""

    def __init__(self, name: str, func: HandlerFunc, field: str, params: Dict[str, Any]):
        self.name = name
        self.func = func
        self.field = field
        self.params = params

    def handle(self, record: Record, opposite_record: Optional[Record]) -> None:
        """Apply the handler to ``record``."""
        self.func(record, opposite_record, self.field, self.params)

    def __repr__(self) -> str:
        return f"BoundHandler({self.name!r}, field={self.field!r})"


class HandlerRegistry:
    """
    Registry of field transformation handlers.

    Handlers mutate ``record[field]`` in place and may read any other field of
    the record being built or of the opposite record.

    Supports:
    - Built-in handlers (set_value, convert, truncate, date_format, ...)
    - Custom handlers registered by name
    """

    def __init__(self):
        """Initialize the handler registry."""
        self._custom_handlers: Dict[str, HandlerFunc] = {}
        self._builtin_handlers = self._register_builtin_handlers()

    def _register_builtin_handlers(self) -> Dict[str, HandlerFunc]:
        """Register all built-in handlers."""
        return {
            "set_value": self._handle_set_value,
            "placeholder": self._handle_placeholder,
            "convert": self._handle_convert,
            "truncate": self._handle_truncate,
            "uppercase": self._handle_uppercase,
            "lowercase": self._handle_lowercase,
            "prefix_add": self._handle_prefix_add,
            "multiply": self._handle_multiply,
            "divide": self._handle_divide,
            "date_format": self._handle_date_format,
            "to_json": self._handle_to_json,
            "copy_field": self._handle_copy_field,
        }

    def register_handler(self, name: str, func: HandlerFunc) -> None:
        """Register a custom handler function."""
        self._custom_handlers[name] = func

    def get(self, name: str) -> Optional[HandlerFunc]:
        """Look up a handler, custom handlers first."""
        return self._custom_handlers.get(name) or self._builtin_handlers.get(name)

    def list_handlers(self) -> List[str]:
        """Names of all available handlers."""
        return sorted(set(self._builtin_handlers) | set(self._custom_handlers))

    def bind(self, config: HandlerConfig, field: str) -> BoundHandler:
        """
        Bind a configured handler to a field.

        Raises:
            MappingError: If no handler is registered under the configured name
        """
        func = self.get(config.name)
        if func is None:
            raise MappingError(
                f"Unknown handler {config.name!r} for field {field!r}",
                details={"available": self.list_handlers()},
            )
        return BoundHandler(config.name, func, field, dict(config.params))

    # Built-in handlers

    def _handle_set_value(self, record: Record, opposite: Optional[Record], field: str, params: Dict) -> None:
        """Set a constant value."""
        record.set_value(field, params.get("value"))

    def _handle_placeholder(self, record: Record, opposite: Optional[Record], field: str, params: Dict) -> None:
        """Blank the field out."""
        record.set_value(field, None)

    def _handle_convert(self, record: Record, opposite: Optional[Record], field: str, params: Dict) -> None:
        """Map a value using a lookup table."""
        value = record.get_value(field)
        mapping = params.get("map", {})
        key = str(value) if value is not None else None
        if key in mapping:
            record.set_value(field, mapping[key])
        elif "default" in params:
            record.set_value(field, params["default"])

    def _handle_truncate(self, record: Record, opposite: Optional[Record], field: str, params: Dict) -> None:
        """Truncate to max length."""
        value = record.get_value(field)
        if value is None:
            return
        record.set_value(field, str(value)[:params.get("length", 255)])

    def _handle_uppercase(self, record: Record, opposite: Optional[Record], field: str, params: Dict) -> None:
        value = record.get_value(field)
        if value is not None:
            record.set_value(field, str(value).upper())

    def _handle_lowercase(self, record: Record, opposite: Optional[Record], field: str, params: Dict) -> None:
        value = record.get_value(field)
        if value is not None:
            record.set_value(field, str(value).lower())

    def _handle_prefix_add(self, record: Record, opposite: Optional[Record], field: str, params: Dict) -> None:
        value = record.get_value(field)
        if value is not None:
            record.set_value(field, f"{params.get('prefix', '')}{value}")

    def _handle_multiply(self, record: Record, opposite: Optional[Record], field: str, params: Dict) -> None:
        value = record.get_value(field)
        if value is None:
            return
        result = float(value) * params.get("factor", 1)
        if params.get("round") is not None:
            result = round(result, params["round"])
        if params.get("integer"):
            result = int(round(result))
        record.set_value(field, result)

    def _handle_divide(self, record: Record, opposite: Optional[Record], field: str, params: Dict) -> None:
        value = record.get_value(field)
        if value is None:
            return
        divisor = params.get("divisor", 1)
        if not divisor:
            raise ValueError(f"Cannot divide field {field} by zero")
        result = float(value) / divisor
        if params.get("round") is not None:
            result = round(result, params["round"])
        record.set_value(field, result)

    def _handle_date_format(self, record: Record, opposite: Optional[Record], field: str, params: Dict) -> None:
        """Reformat a date/time value; integers are treated as unix timestamps."""
        value = record.get_value(field)
        if value in (None, ""):
            return
        if isinstance(value, (int, float)):
            parsed = datetime.fromtimestamp(value, tz=timezone.utc)
        elif isinstance(value, datetime):
            parsed = value
        else:
            parsed = date_parser.parse(str(value))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        output = params.get("format", "%Y-%m-%d %H:%M:%S")
        if output == "unix":
            record.set_value(field, int(parsed.timestamp()))
        else:
            record.set_value(field, parsed.strftime(output))

    def _handle_to_json(self, record: Record, opposite: Optional[Record], field: str, params: Dict) -> None:
        """Serialize a structured value to a JSON string."""
        value = record.get_value(field)
        if value is not None and not isinstance(value, str):
            record.set_value(field, json.dumps(value, default=str))

    def _handle_copy_field(self, record: Record, opposite: Optional[Record], field: str, params: Dict) -> None:
        """Copy a field of the opposite record (or of this record) into the field."""
        source_field = params.get("from", field)
        origin = opposite if opposite is not None and params.get("opposite", True) else record
        record.set_value(field, origin.get_value(source_field))
