"""Mock dispatcher: resolves (path, method) to an operation and builds the response.

Every dispatch gets its own ValueGenerator. Seeds are drawn from a
lock-guarded counter, so concurrent requests never share random state.
"""

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel

from api_mock_engine.errors import GenerationError, MethodNotAllowed, PathNotFound, SchemaLookupFailure
from api_mock_engine.generator.values import ValueGenerator
from api_mock_engine.mock.routing import PathTemplate, sort_by_specificity
from api_mock_engine.parser.base import ArrayNode, Operation, Schema, status_for_method

logger = logging.getLogger(__name__)

COLLECTION_SIZE = 2
FALLBACK_ID = "550e8400-e29b-41d4-a716-446655440000"


class DispatchResult(BaseModel):
    status_code: int
    body: Any
    envelope: Literal["single", "collection"] = "single"
    source: Literal["schema", "fallback", "error"] = "schema"
    allowed_methods: list[str] = []
    path_params: dict[str, str] = {}


class SeedCounter:
    """Hands out consecutive seeds starting at ``start`` (default: current time in ns)."""

    def __init__(self, start: int | None = None):
        self._next = time.time_ns() if start is None else start
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            seed = self._next
            self._next += 1
            return seed


class Dispatcher:
    """Routes inbound requests against a read-only Schema."""

    def __init__(self, schema: Schema, seed: int | None = None):
        self.schema = schema
        self.seeds = SeedCounter(seed)
        self._templates = sort_by_specificity([PathTemplate.parse(p) for p in schema.paths])

    def resolve(self, path: str, method: str) -> tuple[Operation, PathTemplate, dict[str, str]]:
        """Find the operation for a concrete request path.

        Raises PathNotFound when no template matches and MethodNotAllowed
        when the path is known but the method is not declared for it.
        """
        method = method.upper()
        allowed: list[str] = []
        for template in self._templates:
            params = template.match(path)
            if params is None:
                continue
            op = self.schema.lookup(template.template, method)
            if op is not None:
                return op, template, params
            allowed.extend(m for m in self.schema.allowed_methods(template.template) if m not in allowed)
        if allowed:
            raise MethodNotAllowed(path, method, allowed)
        raise PathNotFound(path)

    def dispatch(self, path: str, method: str) -> DispatchResult:
        method = method.upper()
        try:
            op, template, params = self.resolve(path, method)
        except MethodNotAllowed as e:
            return DispatchResult(
                status_code=e.status_code,
                body={"error": "Method not allowed", "method": method, "allowed": e.allowed},
                source="error",
                allowed_methods=e.allowed,
            )
        except SchemaLookupFailure as e:
            return DispatchResult(
                status_code=e.status_code, body={"error": "Not found", "path": path}, source="error"
            )

        status = status_for_method(method)
        collection = method == "GET" and not template.is_single_resource
        node = op.response_for(status)
        if node is not None:
            gen = ValueGenerator(self.seeds.next())
            try:
                body, envelope = self._generate(gen, node, collection)
                return DispatchResult(status_code=status, body=body, envelope=envelope, path_params=params)
            except GenerationError as e:
                logger.warning("Generation failed for %s %s, serving fallback: %s", method, op.path, e)

        body = fallback_fixture(method, collection)
        return DispatchResult(
            status_code=status,
            body=body,
            envelope="collection" if collection else "single",
            source="fallback",
            path_params=params,
        )

    def _generate(self, gen: ValueGenerator, node, collection: bool) -> tuple[Any, str]:
        if collection and isinstance(node, ArrayNode):
            # Envelope items come from the element node; an item-less array raises NilNode.
            items = [gen.generate(node.items) for _ in range(COLLECTION_SIZE)]
            return {"data": items, "total": len(items)}, "collection"
        first = gen.generate(node)
        if not collection:
            return first, "single"
        if isinstance(first, dict):
            items = [first] + [gen.generate(node) for _ in range(COLLECTION_SIZE - 1)]
            return {"data": items, "total": len(items)}, "collection"
        return first, "single"


def fallback_fixture(method: str, collection: bool, now: datetime | None = None) -> dict:
    """Static payload used when no response schema exists or generation failed."""
    now = now or datetime.now(timezone.utc)
    stamp = now.replace(microsecond=0).isoformat().replace("+00:00", "Z")
    method = method.upper()

    if method == "GET":
        if not collection:
            return {"id": FALLBACK_ID, "name": "Mock Resource", "createdAt": stamp}
        items = [
            {
                "id": f"550e8400-e29b-41d4-a716-44665544000{i}",
                "name": f"Mock Resource {i + 1}",
                "createdAt": stamp,
            }
            for i in range(COLLECTION_SIZE)
        ]
        return {"data": items, "total": len(items)}
    if method == "POST":
        return {
            "id": FALLBACK_ID,
            "name": "New Mock Resource",
            "createdAt": stamp,
            "message": "Resource created successfully",
        }
    if method in ("PUT", "PATCH"):
        return {
            "id": FALLBACK_ID,
            "name": "Updated Mock Resource",
            "updatedAt": stamp,
            "message": "Resource updated successfully",
        }
    if method == "DELETE":
        return {"message": "Resource deleted successfully"}
    return {}
