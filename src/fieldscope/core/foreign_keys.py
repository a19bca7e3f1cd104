"""
Foreign-key heuristics.

Guesses which schema a field points at from its name alone. This is a
naming heuristic, not a guarantee, so it is kept pluggable: rules implement
ForeignKeyRule and the detector asks each one in turn.

Default rule (IdSuffixRule):
    `user_id`, `userId`, `user-id`  ->  schema `User`
    provided `User` exists and declares an `id` field.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Mapping, Sequence, Tuple

from .resolver import ResolvedSchema


class TokenMatcher:
    """Utility class for name normalisation."""

    SEPARATORS = ["_", ".", "-", "/", ":", " "]

    @staticmethod
    def normalize(name: str) -> str:
        result = name.lower()
        for sep in TokenMatcher.SEPARATORS:
            result = result.replace(sep, "")
        return result

    @staticmethod
    def tokenize(name: str) -> List[str]:
        """Split snake, kebab, dotted and camelCase names into lower-case tokens."""
        spaced = []
        for i, ch in enumerate(name):
            if ch.isupper() and i > 0 and (name[i - 1].islower() or name[i - 1].isdigit()):
                spaced.append(" ")
            spaced.append(ch)
        normalized = "".join(spaced).lower()
        for sep in TokenMatcher.SEPARATORS:
            normalized = normalized.replace(sep, " ")
        return [t for t in normalized.split() if t]


class ForeignKeyRule(ABC):
    """Abstract base class for foreign-key rules."""

    @abstractmethod
    def targets(self, field_name: str, schemas: Mapping[str, ResolvedSchema]) -> List[str]:
        """Return the schema names this field is believed to reference."""

    @abstractmethod
    def get_name(self) -> str:
        pass


class IdSuffixRule(ForeignKeyRule):
    """
    `<prefix>_id` / `<prefix>Id` points at the schema named `<prefix>`.

    The prefix is compared to schema names after normalisation, so
    `pet_owner_id` matches `PetOwner`. The target must declare
    `identifier_field`.
    """

    def __init__(self, identifier_field: str = "id"):
        self.identifier_field = identifier_field

    def get_name(self) -> str:
        return "IdSuffixRule"

    def targets(self, field_name: str, schemas: Mapping[str, ResolvedSchema]) -> List[str]:
        tokens = TokenMatcher.tokenize(field_name)
        if len(tokens) < 2 or tokens[-1] != self.identifier_field:
            return []

        prefix = "".join(tokens[:-1])
        matches = []
        for name, schema in schemas.items():
            if TokenMatcher.normalize(name) != prefix:
                continue
            if self.identifier_field in schema.field_names:
                matches.append(name)
        return sorted(matches)


class ForeignKeyDetector:
    """Runs a list of rules and merges their answers."""

    def __init__(self, rules: Sequence[ForeignKeyRule] | None = None):
        self.rules = list(rules) if rules is not None else [IdSuffixRule()]

    def targets(self, field_name: str, schemas: Mapping[str, ResolvedSchema]) -> Tuple[str, ...]:
        found: List[str] = []
        for rule in self.rules:
            for target in rule.targets(field_name, schemas):
                if target not in found:
                    found.append(target)
        return tuple(found)

    def scan(
        self,
        field_names: Iterable[str],
        schemas: Mapping[str, ResolvedSchema],
    ) -> dict:
        """Map every field that looks like a foreign key to its targets."""
        result = {}
        for name in field_names:
            targets = self.targets(name, schemas)
            if targets:
                result[name] = targets
        return result
