"""Deterministic value generator — synthesizes data for a TypedNode tree.

A ValueGenerator owns its own seeded random source. Two generators built
with the same seed and reference time yield the same values for the same
sequence of ``generate`` calls. Instances are not thread-safe; create one
per generation session.
"""

import random
import uuid
from datetime import datetime, timedelta, timezone

from api_mock_engine.errors import GenerationDepthExceeded, NilNode, UnsupportedNodeKind
from api_mock_engine.parser.base import (
    ArrayNode,
    BooleanNode,
    IntegerNode,
    NumberNode,
    ObjectNode,
    StringNode,
)

MAX_DEPTH = 32

DEFAULT_MIN = 0
DEFAULT_MAX = 100
DEFAULT_MIN_ITEMS = 2
DEFAULT_MAX_ITEMS = 5

WORDS = ["amber", "birch", "cedar", "dune", "ember", "fjord", "grove", "harbor"]


class ValueGenerator:
    """Generates values that honor type, format, enum and bound constraints."""

    def __init__(self, seed: int, now: datetime | None = None):
        self.seed = seed
        self.now = now or datetime.now(timezone.utc)
        self._rng = random.Random(seed)

    def generate(self, node):
        """Generate one value for ``node``.

        Raises NilNode for ``None``, UnsupportedNodeKind for anything that is
        not a TypedNode, and GenerationDepthExceeded for trees nested deeper
        than MAX_DEPTH (which in practice means a cycle).
        """
        return self._generate(node, 0)

    def _generate(self, node, depth: int):
        if node is None:
            raise NilNode("cannot generate a value for an empty node")
        if depth > MAX_DEPTH:
            raise GenerationDepthExceeded(f"schema nesting exceeds {MAX_DEPTH} levels")

        if isinstance(node, StringNode):
            return self._string(node)
        if isinstance(node, IntegerNode):
            return self._integer(node)
        if isinstance(node, NumberNode):
            return self._number(node)
        if isinstance(node, BooleanNode):
            return self._rng.random() < 0.5
        if isinstance(node, ArrayNode):
            return self._array(node, depth)
        if isinstance(node, ObjectNode):
            return self._object(node, depth)
        raise UnsupportedNodeKind(f"unsupported node kind: {type(node).__name__}")

    def _string(self, node: StringNode) -> str:
        # Enum takes precedence over format
        if node.enum_values:
            return node.enum_values[self._rng.randrange(len(node.enum_values))]

        if node.format == "date-time":
            moment = self.now - timedelta(hours=self._rng.randrange(365 * 24))
            return moment.replace(microsecond=0).isoformat().replace("+00:00", "Z")
        if node.format == "date":
            return (self.now - timedelta(days=self._rng.randrange(365))).date().isoformat()
        if node.format == "email":
            return f"user{self._rng.randrange(1000)}@example.com"
        if node.format == "uuid":
            return str(uuid.UUID(int=self._rng.getrandbits(128)))
        if node.format == "uri":
            return f"https://example.com/resource/{self._rng.randrange(1000)}"
        return self._rng.choice(WORDS)

    def _integer(self, node: IntegerNode) -> int:
        low = DEFAULT_MIN if node.minimum is None else node.minimum
        high = DEFAULT_MAX if node.maximum is None else node.maximum
        if high <= low:
            return low
        return self._rng.randint(low, high)

    def _number(self, node: NumberNode) -> float:
        low = float(DEFAULT_MIN if node.minimum is None else node.minimum)
        high = float(DEFAULT_MAX if node.maximum is None else node.maximum)
        if high <= low:
            return low
        return low + self._rng.random() * (high - low)

    def _array(self, node: ArrayNode, depth: int) -> list:
        if node.items is None:
            return []
        low, high = _length_bounds(node)
        length = low if high <= low else self._rng.randint(low, high)
        return [self._generate(node.items, depth + 1) for _ in range(length)]

    def _object(self, node: ObjectNode, depth: int) -> dict:
        result = {}
        for name, prop in node.properties:
            if prop is None:
                continue
            result[name] = self._generate(prop, depth + 1)
        return result


def _length_bounds(node: ArrayNode) -> tuple[int, int]:
    """Declared length range when both bounds are given, otherwise the default range."""
    if node.min_items is None or node.max_items is None:
        return DEFAULT_MIN_ITEMS, DEFAULT_MAX_ITEMS
    return max(node.min_items, 0), max(node.max_items, 0)
