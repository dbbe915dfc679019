"""Decoded bencode values together with the byte range each one came from.

Every element remembers ``start`` and ``end``, a half-open range into the
buffer it was decoded from, so ``buffer[start:end]`` gives back exactly the
bytes that encode it.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterator, Optional

# ByteStrings longer than this are cut when rendered
DISPLAY_LIMIT = 120


class Element(ABC):
    start: int
    end: int

    def raw(self, data: bytes) -> bytes:
        """Returns the original encoded bytes of this element"""
        return bytes(data[self.start : self.end])

    @abstractmethod
    def to_python(self) -> Any:
        ...

    def __str__(self) -> str:
        return render(self)


@dataclass(frozen=True)
class Integer(Element):
    value: int
    start: int
    end: int

    def to_python(self) -> int:
        return self.value


@dataclass(frozen=True)
class ByteString(Element):
    value: bytes
    start: int
    end: int

    def to_python(self) -> bytes:
        return self.value

    def text(self, encoding: str = "utf-8") -> Optional[str]:
        """Payload as text, None if it is not valid in ``encoding``"""
        try:
            return self.value.decode(encoding)
        except UnicodeDecodeError:
            return None


@dataclass(frozen=True)
class List(Element):
    value: tuple[Element, ...]
    start: int
    end: int

    def __len__(self) -> int:
        return len(self.value)

    def __iter__(self) -> Iterator[Element]:
        return iter(self.value)

    def __getitem__(self, index: int) -> Element:
        return self.value[index]

    def to_python(self) -> list:
        return [item.to_python() for item in self.value]


def _as_key(key: str | bytes) -> bytes:
    if isinstance(key, str):
        return key.encode("utf-8")
    return key


@dataclass(frozen=True)
class Dictionary(Element):
    value: dict[bytes, Element]
    start: int
    end: int

    def __post_init__(self):
        # keys are exposed in ascending byte order whatever order they were read in
        object.__setattr__(self, "value", dict(sorted(self.value.items())))

    def __hash__(self) -> int:
        return hash((tuple(self.value.items()), self.start, self.end))

    def __len__(self) -> int:
        return len(self.value)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.value)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (str, bytes)):
            return False
        return _as_key(key) in self.value

    def __getitem__(self, key: str | bytes) -> Element:
        return self.value[_as_key(key)]

    def get(self, key: str | bytes, default: Optional[Element] = None) -> Optional[Element]:
        return self.value.get(_as_key(key), default)

    def keys(self):
        return self.value.keys()

    def items(self):
        return self.value.items()

    def to_python(self) -> dict:
        return {key: val.to_python() for key, val in self.value.items()}


def ellipsize(text: str, max_len: int = DISPLAY_LIMIT) -> str:
    if len(text) > max_len:
        return text[: max_len - 3] + "..."
    return text


def _display_text(payload: bytes) -> str:
    return payload.decode("utf-8", errors="backslashreplace")


def _render(element: Element, lines: list[str], indent: int, attached: bool) -> None:
    pad = " " * indent
    lead = "" if attached else pad

    if isinstance(element, Integer):
        lines.append(f"{lead}{element.value}\n")
    elif isinstance(element, ByteString):
        lines.append(f'{lead}"{ellipsize(_display_text(element.value))}"\n')
    elif isinstance(element, List):
        lines.append(f"{lead}[\n")
        for item in element:
            _render(item, lines, indent + 2, False)
        lines.append(f"{pad}]\n")
    elif isinstance(element, Dictionary):
        lines.append(f"{lead}{{\n")
        for key, val in element.items():
            lines.append(f'{pad}  "{_display_text(key)}": ')
            _render(val, lines, indent + 4, True)
        lines.append(f"{pad}}}\n")
    else:
        raise TypeError(f"Cannot render {type(element)}.")


def render(element: Element) -> str:
    """
    Renders an element tree as indented text

    Args:
        - element (Element): Root of the tree to render

    Returns:
        - str: One line per scalar or bracket, each ending with a newline
    """
    lines: list[str] = []
    _render(element, lines, 0, True)
    return "".join(lines)
