"""Fixture generator: reproducible request/response payloads for one operation."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel

from api_mock_engine.generator.values import ValueGenerator
from api_mock_engine.parser.base import Operation, status_for_method

BODY_METHODS = ("POST", "PUT", "PATCH")


class Fixture(BaseModel):
    """One generated payload, tagged with the seed that reproduces it."""

    index: int
    seed: int
    kind: Literal["request", "response"]
    status_code: Optional[int] = None
    payload: Any


def generate_fixtures(
    operation: Operation, seed: int, count: int = 1, now: datetime | None = None
) -> list[Fixture]:
    """Generate ``count`` rounds of payloads for an operation.

    Round ``i`` uses a fresh ValueGenerator seeded with ``seed + i``. For
    POST/PUT/PATCH the request body (if declared) comes first, then the
    response body for the conventional status code. Generation errors are
    not caught.
    """
    if count < 1:
        raise ValueError("count must be at least 1")

    status = status_for_method(operation.method)
    response_node = operation.response_for(status)
    fixtures: list[Fixture] = []

    for i in range(count):
        gen = ValueGenerator(seed + i, now=now)

        if operation.method in BODY_METHODS and operation.request_body is not None:
            fixtures.append(
                Fixture(index=i, seed=seed + i, kind="request", payload=gen.generate(operation.request_body))
            )

        if response_node is not None:
            fixtures.append(
                Fixture(
                    index=i,
                    seed=seed + i,
                    kind="response",
                    status_code=status,
                    payload=gen.generate(response_node),
                )
            )

    return fixtures
