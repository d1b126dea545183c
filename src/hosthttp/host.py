"""
Host Value Model

Shapes the embedding host exchanges with the HTTP module: nil (``None``),
strings, numbers, booleans, functions and tables. A host table is ordered and
carries both an array part (1-based integer keys) and a hash part.

Usage:
    host = TableHost()
    host.preload_module("http", HttpModule().loader)
    http = host.require("http")
    response, = http.raw_get("get")("http://127.0.0.1:8080/")
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

HostFunction = Callable[..., Tuple[Any, ...]]
Loader = Callable[["Host"], Any]


class HostTable:
    """
    Ordered host table with an array part and a hash part.

    The array part may hold ``None`` holes so that positional results keep
    their length (a batch of N requests always yields N slots).
    """

    __slots__ = ("_array", "_hash")

    def __init__(self, array: Optional[List[Any]] = None, hash: Optional[Dict[Any, Any]] = None):
        self._array: List[Any] = list(array) if array else []
        self._hash: Dict[Any, Any] = dict(hash) if hash else {}

    @classmethod
    def from_python(cls, value: Any) -> Any:
        """Recursively convert dicts and lists into host tables."""
        if isinstance(value, HostTable):
            return value
        if isinstance(value, Mapping):
            table = cls()
            for key, item in value.items():
                table.raw_set(key, cls.from_python(item))
            return table
        if isinstance(value, (list, tuple)):
            return cls(array=[cls.from_python(item) for item in value])
        return value

    def to_python(self) -> Any:
        """Inverse of ``from_python``: a list when there is no hash part, a dict otherwise."""
        def convert(item):
            return item.to_python() if isinstance(item, HostTable) else item

        if not self._hash:
            return [convert(item) for item in self._array]
        result: Dict[Any, Any] = {
            index: convert(item) for index, item in enumerate(self._array, start=1) if item is not None
        }
        result.update((key, convert(item)) for key, item in self._hash.items())
        return result

    def _array_index(self, key: Any) -> Optional[int]:
        if isinstance(key, bool):
            return None
        if isinstance(key, float) and key.is_integer():
            key = int(key)
        if isinstance(key, int) and key >= 1:
            return key
        return None

    def raw_get(self, key: Any) -> Any:
        index = self._array_index(key)
        if index is not None and index <= len(self._array):
            return self._array[index - 1]
        if index is not None:
            key = index
        return self._hash.get(key)

    def raw_set(self, key: Any, value: Any) -> None:
        if key is None:
            raise ValueError("table index is nil")
        index = self._array_index(key)
        if index is not None:
            if index <= len(self._array):
                self._array[index - 1] = value
                return
            if index == len(self._array) + 1:
                self._array.append(value)
                self._hash.pop(index, None)
                # Migrate any consecutive keys that were parked in the hash part
                while len(self._array) + 1 in self._hash:
                    self._array.append(self._hash.pop(len(self._array) + 1))
                return
            key = index
        if value is None:
            self._hash.pop(key, None)
        else:
            self._hash[key] = value

    def append(self, value: Any) -> None:
        self._array.append(value)

    def items(self) -> Iterator[Tuple[Any, Any]]:
        """Non-nil entries: array part in index order, then the hash part in insertion order."""
        for index, value in enumerate(self._array, start=1):
            if value is not None:
                yield index, value
        yield from self._hash.items()

    def for_each(self, fn: Callable[[Any, Any], None]) -> None:
        for key, value in self.items():
            fn(key, value)

    def array(self) -> List[Any]:
        return list(self._array)

    def __len__(self) -> int:
        return len(self._array)

    def __repr__(self) -> str:
        return f"table: 0x{id(self):08x}"


def _number_string(value: Any) -> str:
    if isinstance(value, int):
        return str(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def host_string(value: Any) -> str:
    """String form of any host value, as the host itself would print it."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _number_string(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="surrogateescape")
    if isinstance(value, (HostTable, Mapping, list, tuple)):
        return f"table: 0x{id(value):08x}"
    if callable(value):
        return f"function: 0x{id(value):08x}"
    return str(value)


def to_string_arg(value: Any) -> str:
    """Coerce a positional argument to a string; only strings and numbers survive."""
    if isinstance(value, bool):
        return ""
    if isinstance(value, (str, bytes, bytearray, int, float)):
        return host_string(value)
    return ""


def is_mapping(value: Any) -> bool:
    return isinstance(value, (HostTable, Mapping))


def mapping_items(value: Any) -> Iterator[Tuple[Any, Any]]:
    """Iterate a host table or Python mapping uniformly."""
    if isinstance(value, HostTable):
        return value.items()
    return iter(value.items())


class Host(ABC):
    """
    Abstract embedding host.

    Only what the module needs from a host: creating tables, publishing
    functions and resolving preloaded modules.
    """

    @abstractmethod
    def new_table(self) -> Any:
        pass

    @abstractmethod
    def set_funcs(self, table: Any, funcs: Dict[str, HostFunction]) -> Any:
        pass

    @abstractmethod
    def set_field(self, table: Any, key: Any, value: Any) -> None:
        pass

    @abstractmethod
    def preload_module(self, name: str, loader: Loader) -> None:
        pass

    @abstractmethod
    def require(self, name: str) -> Any:
        pass


class TableHost(Host):
    """In-process host backed by ``HostTable`` values."""

    def __init__(self):
        self._preload: Dict[str, Loader] = {}
        self._loaded: Dict[str, Any] = {}

    def new_table(self) -> HostTable:
        return HostTable()

    def set_funcs(self, table: HostTable, funcs: Dict[str, HostFunction]) -> HostTable:
        for name, fn in funcs.items():
            table.raw_set(name, fn)
        return table

    def set_field(self, table: HostTable, key: Any, value: Any) -> None:
        table.raw_set(key, value)

    def preload_module(self, name: str, loader: Loader) -> None:
        self._preload[name] = loader

    def require(self, name: str) -> Any:
        if name in self._loaded:
            return self._loaded[name]
        if name not in self._preload:
            raise LookupError(f"module '{name}' not found")
        module = self._preload[name](self)
        self._loaded[name] = module
        return module
