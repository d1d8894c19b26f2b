"""Property bags: the unit of persisted entity state.

Every object read from entities.xml becomes a ConfluenceProperties bag, an
ordered mapping of property name to PropertyValue. PropertyValue is a tagged
variant (string, long, boolean, date, nested bag, list, set) with an explicit
UNSUPPORTED variant for extension data the reader does not understand;
unsupported values are never stored.

Bags are persisted as YAML documents. The YAML native types map one to one
onto the variants, so a bag reloaded from disk has the same kinds it was
saved with.
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple, Union

import yaml

from .errors import DateParseError, PropertiesError
from .models import DATE_FORMAT

logger = logging.getLogger(__name__)

DEFAULT_LIST_DELIMITER = ","


def parse_date(value: Optional[str], key: Optional[str] = None) -> Optional[datetime]:
    """Parse a date in the export format (yyyy-MM-dd HH:mm:ss.SSS, UTC).

    Args:
        value: Text to parse, may be None
        key: Property name, only used in the error message

    Returns:
        Timezone aware datetime in UTC, or None when value is None

    Raises:
        DateParseError: If value is not None and does not match the format
    """
    if value is None:
        return None

    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        raise DateParseError(value, key)


def format_date(value: datetime) -> str:
    """Format a datetime back to the export format, milliseconds precision."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(DATE_FORMAT)[:-3]


class ValueKind(Enum):
    """Variant tag of a PropertyValue."""
    STRING = "string"
    LONG = "long"
    BOOLEAN = "boolean"
    DATE = "date"
    BAG = "bag"
    LIST = "list"
    SET = "set"
    UNSUPPORTED = "unsupported"


# Kinds whose payload is hashable
SCALAR_KINDS = frozenset({ValueKind.STRING, ValueKind.LONG, ValueKind.BOOLEAN, ValueKind.DATE})


@dataclass(frozen=True)
class PropertyValue:
    """A single property value tagged with its kind.

    LIST and SET payloads are tuples of PropertyValue; SET payloads hold no
    duplicates. BAG payloads are ConfluenceProperties instances.

    Example:
        >>> PropertyValue.of(["a", 1]).kind
        <ValueKind.LIST: 'list'>
        >>> PropertyValue.of(["a", 1]).to_python()
        ['a', 1]
    """
    kind: ValueKind
    value: Any = None

    @classmethod
    def string(cls, value: str) -> "PropertyValue":
        return cls(ValueKind.STRING, value)

    @classmethod
    def long(cls, value: int) -> "PropertyValue":
        return cls(ValueKind.LONG, int(value))

    @classmethod
    def boolean(cls, value: bool) -> "PropertyValue":
        return cls(ValueKind.BOOLEAN, bool(value))

    @classmethod
    def date(cls, value: datetime) -> "PropertyValue":
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return cls(ValueKind.DATE, value)

    @classmethod
    def bag(cls, value: "ConfluenceProperties") -> "PropertyValue":
        return cls(ValueKind.BAG, value)

    @classmethod
    def list_of(cls, items) -> "PropertyValue":
        """Build a LIST, dropping unsupported elements."""
        values = tuple(
            item for item in (cls.of(element) for element in items)
            if item.kind is not ValueKind.UNSUPPORTED
        )
        return cls(ValueKind.LIST, values)

    @classmethod
    def set_of(cls, items) -> "PropertyValue":
        """Build a SET, dropping unsupported elements and duplicates."""
        values: List[PropertyValue] = []
        seen: Set[Tuple[ValueKind, Any]] = set()
        containers: List[PropertyValue] = []
        for element in items:
            item = cls.of(element)
            if item.kind is ValueKind.UNSUPPORTED:
                continue

            if item.kind in SCALAR_KINDS:
                key = (item.kind, item.value)
                if key in seen:
                    continue
                seen.add(key)
            else:
                # Bags and nested collections cannot be hashed
                if item in containers:
                    continue
                containers.append(item)

            values.append(item)
        return cls(ValueKind.SET, tuple(values))

    @classmethod
    def unsupported(cls) -> "PropertyValue":
        return cls(ValueKind.UNSUPPORTED)

    @classmethod
    def of(cls, raw: Any) -> "PropertyValue":
        """Wrap a plain Python value in the matching variant.

        bool is checked before int since it is a subclass of it. Anything
        that has no variant becomes UNSUPPORTED.
        """
        if isinstance(raw, PropertyValue):
            return raw
        if isinstance(raw, bool):
            return cls.boolean(raw)
        if isinstance(raw, int):
            return cls.long(raw)
        if isinstance(raw, str):
            return cls.string(raw)
        if isinstance(raw, datetime):
            return cls.date(raw)
        if isinstance(raw, ConfluenceProperties):
            return cls.bag(raw)
        if isinstance(raw, dict):
            return cls.bag(ConfluenceProperties.from_dict(raw))
        if isinstance(raw, (set, frozenset)):
            return cls.set_of(raw)
        if isinstance(raw, (list, tuple)):
            return cls.list_of(raw)
        return cls.unsupported()

    def to_python(self) -> Any:
        """Unwrap to plain Python values (lists for both LIST and SET)."""
        if self.kind in (ValueKind.LIST, ValueKind.SET):
            return [item.to_python() for item in self.value]
        return self.value

    def to_yaml(self) -> Any:
        """Unwrap to YAML-serializable values, keeping sets as sets."""
        if self.kind is ValueKind.LIST:
            return [item.to_yaml() for item in self.value]
        if self.kind is ValueKind.SET:
            elements = [item.to_yaml() for item in self.value]
            try:
                return set(elements)
            except TypeError:
                # Nested containers cannot live in a YAML set
                return elements
        if self.kind is ValueKind.BAG:
            return self.value.to_dict()
        return self.value


# Line breaks that plain and single quoted YAML scalars do not preserve on
# reload; double quoted scalars escape them.
UNSAFE_LINE_BREAKS = ("\r", "\x85", "\u2028", "\u2029")


class PropertiesDumper(yaml.SafeDumper):
    """SafeDumper writing text with unsafe line breaks as double quoted scalars."""


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if any(character in data for character in UNSAFE_LINE_BREAKS):
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style='"')
    return dumper.represent_str(data)


PropertiesDumper.add_representer(str, _represent_str)


class ConfluenceProperties:
    """Ordered property bag, optionally backed by a YAML file.

    Getters never raise for a missing key: they return the caller supplied
    default. Typed getters coerce between scalars and lists: get_list on a
    string splits it on the list delimiter (unless splitting was disabled
    with disable_list_delimiter), and scalar getters on a list read its
    first element.

    Example:
        >>> props = ConfluenceProperties()
        >>> props.set("space", 1)
        >>> props.get_long("space")
        1
        >>> props.get_string("missing", "default")
        'default'
    """

    def __init__(
        self,
        file_path: Optional[Union[str, Path]] = None,
        list_delimiter: Optional[str] = DEFAULT_LIST_DELIMITER,
    ):
        self.file_path = Path(file_path) if file_path is not None else None
        self.list_delimiter = list_delimiter
        self._values: Dict[str, PropertyValue] = {}

    @classmethod
    def create(
        cls,
        file_path: Union[str, Path],
        list_delimiter: Optional[str] = DEFAULT_LIST_DELIMITER,
    ) -> "ConfluenceProperties":
        """Create a bag bound to file_path, loading it if the file exists.

        Raises:
            PropertiesError: If the existing file cannot be read or parsed
        """
        properties = cls(file_path, list_delimiter)
        if properties.file_path.exists():
            properties.load()
        return properties

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConfluenceProperties":
        properties = cls()
        for key, value in data.items():
            properties.set(str(key), value)
        return properties

    def disable_list_delimiter(self) -> None:
        """Never split string values into lists in get_list."""
        self.list_delimiter = None

    # Mapping protocol

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfluenceProperties):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"ConfluenceProperties({self.file_path}, {self.to_dict()!r})"

    def keys(self) -> List[str]:
        return list(self._values)

    def items(self) -> Iterator[Tuple[str, PropertyValue]]:
        return iter(self._values.items())

    def is_empty(self) -> bool:
        return not self._values

    # Writing

    def set(self, key: str, value: Any) -> None:
        """Set a property, replacing any previous value.

        None removes the property. UNSUPPORTED values are ignored so the
        key keeps whatever it held before.
        """
        if value is None:
            self._values.pop(key, None)
            return

        property_value = PropertyValue.of(value)
        if property_value.kind is ValueKind.UNSUPPORTED:
            logger.debug(f"Ignoring unsupported value for property '{key}'")
            return

        self._values[key] = property_value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def copy(self, other: "ConfluenceProperties") -> None:
        """Merge every key of other into this bag, overwriting existing keys."""
        for key, value in other.items():
            self._values[key] = value

    # Reading

    def get_value(self, key: str) -> Optional[PropertyValue]:
        return self._values.get(key)

    def get(self, key: str, default: Any = None) -> Any:
        value = self._values.get(key)
        return value.to_python() if value is not None else default

    def _first_scalar(self, key: str) -> Optional[PropertyValue]:
        value = self._values.get(key)
        if value is not None and value.kind in (ValueKind.LIST, ValueKind.SET):
            return value.value[0] if value.value else None
        return value

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._first_scalar(key)
        if value is None:
            return default

        if value.kind is ValueKind.STRING:
            return value.value
        if value.kind is ValueKind.LONG:
            return str(value.value)
        if value.kind is ValueKind.BOOLEAN:
            return "true" if value.value else "false"
        if value.kind is ValueKind.DATE:
            return format_date(value.value)
        return default

    def get_long(self, key: str, default: Optional[int] = None) -> Optional[int]:
        """Get a property as an integer.

        Raises:
            ValueError: If the stored value cannot be read as an integer
        """
        value = self._first_scalar(key)
        if value is None:
            return default

        if value.kind is ValueKind.LONG:
            return value.value
        if value.kind is ValueKind.STRING:
            text = value.value.strip()
            if not text:
                return default
            return int(text)
        raise ValueError(f"Property '{key}' of kind {value.kind.value} is not a number")

    get_int = get_long

    def get_bool(self, key: str, default: Optional[bool] = None) -> Optional[bool]:
        """Get a property as a boolean.

        Raises:
            ValueError: If the stored value is neither a boolean nor true/false text
        """
        value = self._first_scalar(key)
        if value is None:
            return default

        if value.kind is ValueKind.BOOLEAN:
            return value.value
        if value.kind is ValueKind.STRING:
            text = value.value.strip().lower()
            if text in ("true", "false"):
                return text == "true"
        raise ValueError(f"Property '{key}' is not a boolean")

    def get_date(self, key: str, default: Optional[datetime] = None) -> Optional[datetime]:
        """Get a property as a UTC datetime.

        Raises:
            DateParseError: If the stored text does not match the export format
        """
        value = self._first_scalar(key)
        if value is None:
            return default

        if value.kind is ValueKind.DATE:
            return value.value
        if value.kind is ValueKind.STRING:
            return parse_date(value.value, key)
        raise DateParseError(str(value.value), key)

    def get_list(self, key: str, default: Optional[List[Any]] = None) -> Optional[List[Any]]:
        """Get a property as a list.

        Lists and sets are returned element by element. A string is split
        on the list delimiter when splitting is enabled, any other scalar
        becomes a single element list.
        """
        value = self._values.get(key)
        if value is None:
            return default

        if value.kind in (ValueKind.LIST, ValueKind.SET):
            return value.to_python()
        if value.kind is ValueKind.STRING and self.list_delimiter:
            return value.value.split(self.list_delimiter)
        return [value.to_python()]

    def get_properties(
        self,
        key: str,
        default: Optional["ConfluenceProperties"] = None,
    ) -> Optional["ConfluenceProperties"]:
        value = self._values.get(key)
        if value is None or value.kind is not ValueKind.BAG:
            return default
        return value.value

    # Persistence

    def to_dict(self) -> Dict[str, Any]:
        return {key: value.to_yaml() for key, value in self._values.items()}

    def _require_file(self, operation: str) -> Path:
        if self.file_path is None:
            raise PropertiesError("<memory>", operation, "Properties are not bound to a file")
        return self.file_path

    def load(self) -> None:
        """Replace the bag content with the content of its backing file.

        Raises:
            PropertiesError: If the file cannot be read or is not a YAML mapping
        """
        file_path = self._require_file("load")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise PropertiesError(str(file_path), "load", str(e))
        except yaml.YAMLError as e:
            raise PropertiesError(str(file_path), "load", f"Invalid YAML: {e}")

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise PropertiesError(
                str(file_path),
                "load",
                f"Expected a mapping, got {type(data).__name__}"
            )

        self._values = {}
        for key, value in data.items():
            self.set(str(key), value)

    def save(self) -> None:
        """Write the bag to its backing file, creating parent directories.

        Raises:
            PropertiesError: If the file or its directory cannot be written
        """
        file_path = self._require_file("save")

        try:
            os.makedirs(file_path.parent, exist_ok=True)
            with open(file_path, "w", encoding="utf-8") as f:
                yaml.dump(
                    self.to_dict(),
                    f,
                    Dumper=PropertiesDumper,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                )
        except OSError as e:
            raise PropertiesError(str(file_path), "save", str(e))
        except yaml.YAMLError as e:
            raise PropertiesError(str(file_path), "save", f"Cannot serialize: {e}")
