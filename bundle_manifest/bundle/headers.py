"""Parsing helpers for manifest header syntax and instruction patterns."""

from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from typing import Dict, Iterable, Iterator, List, Optional


def _split_outside_quotes(value: str, separator: str) -> List[str]:
    parts: List[str] = []
    current: List[str] = []
    quoted = False
    for char in value:
        if char == '"':
            quoted = not quoted
        if char == separator and not quoted:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return parts


def split_clauses(value: Optional[str]) -> List[str]:
    """Split a header value into its top-level comma separated clauses."""

    if not value:
        return []
    return [part.strip() for part in _split_outside_quotes(value, ",") if part.strip()]


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def parse_header(value: Optional[str]) -> Dict[str, Dict[str, str]]:
    """Parse ``key;attr=value;dir:=value, ...`` into an ordered mapping.

    Directives keep their trailing colon in the attribute name (``merge:``) so
    they never collide with attributes of the same name.
    """

    result: Dict[str, Dict[str, str]] = {}
    for clause in split_clauses(value):
        keys: List[str] = []
        attrs: Dict[str, str] = {}
        for segment in _split_outside_quotes(clause, ";"):
            segment = segment.strip()
            if not segment:
                continue
            if ":=" in segment:
                name, raw = segment.split(":=", 1)
                attrs[f"{name.strip()}:"] = _unquote(raw)
            elif "=" in segment:
                name, raw = segment.split("=", 1)
                attrs[name.strip()] = _unquote(raw)
            else:
                keys.append(segment)
        for key in keys:
            result[key] = dict(attrs)
    return result


@dataclass(frozen=True)
class Instruction:
    """A single glob pattern with optional negation and directives."""

    pattern: str
    negated: bool = False
    attributes: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, pattern: str, attributes: Optional[Dict[str, str]] = None) -> "Instruction":
        negated = pattern.startswith("!")
        if negated:
            pattern = pattern[1:]
        return cls(pattern=pattern, negated=negated, attributes=dict(attributes or {}))

    def matches(self, name: str) -> bool:
        return fnmatchcase(name, self.pattern)

    def directive(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(f"{name}:", default)


class Instructions:
    """Ordered instruction list where the first matching pattern wins."""

    def __init__(self, instructions: Iterable[Instruction] = ()) -> None:
        self._instructions = list(instructions)

    @classmethod
    def from_header(cls, value: Optional[str]) -> "Instructions":
        return cls(Instruction.parse(key, attrs) for key, attrs in parse_header(value).items())

    def match(self, name: str) -> Optional[Instruction]:
        for instruction in self._instructions:
            if instruction.matches(name):
                return instruction
        return None

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self._instructions)

    def __len__(self) -> int:
        return len(self._instructions)

    def __bool__(self) -> bool:
        return bool(self._instructions)
