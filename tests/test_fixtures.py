from datetime import datetime, timezone
from pathlib import Path

import pytest

from api_mock_engine.errors import UnsupportedNodeKind
from api_mock_engine.generator.fixtures import generate_fixtures
from api_mock_engine.generator.values import ValueGenerator
from api_mock_engine.parser.base import ArrayNode, Operation
from api_mock_engine.parser.swagger import load_schema

FIXTURES = Path(__file__).parent / "fixtures"
NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest.fixture
def petstore():
    return load_schema(FIXTURES / "petstore.yaml")


class TestGenerateFixtures:
    def test_seed_per_iteration(self, petstore):
        op = petstore.lookup("/pets", "GET")
        fixtures = generate_fixtures(op, seed=42, count=3, now=NOW)

        assert [f.kind for f in fixtures] == ["response"] * 3
        assert [f.seed for f in fixtures] == [42, 43, 44]
        assert [f.status_code for f in fixtures] == [200] * 3

        node = op.response_for(200)
        for f in fixtures:
            assert f.payload == ValueGenerator(f.seed, now=NOW).generate(node)

    def test_repeatable(self, petstore):
        op = petstore.lookup("/pets", "GET")
        first = generate_fixtures(op, seed=7, count=2, now=NOW)
        second = generate_fixtures(op, seed=7, count=2, now=NOW)
        assert first == second
        assert first[0].payload != first[1].payload

    def test_post_emits_request_then_response(self, petstore):
        fixtures = generate_fixtures(petstore.lookup("/pets", "POST"), seed=1, count=2, now=NOW)
        assert [(f.index, f.kind, f.status_code) for f in fixtures] == [
            (0, "request", None),
            (0, "response", 201),
            (1, "request", None),
            (1, "response", 201),
        ]
        assert set(fixtures[0].payload) == {"name", "status"}
        assert "id" in fixtures[1].payload

    def test_delete_without_json_response_yields_nothing(self, petstore):
        assert generate_fixtures(petstore.lookup("/pets/{petId}", "DELETE"), seed=1) == []

    def test_count_must_be_positive(self, petstore):
        with pytest.raises(ValueError):
            generate_fixtures(petstore.lookup("/pets", "GET"), seed=1, count=0)

    def test_generation_failure_is_raised(self):
        bad = ArrayNode.model_construct(items=object(), min_items=1, max_items=1)
        op = Operation.model_construct(method="GET", path="/x", request_body=None, responses={"200": bad})
        with pytest.raises(UnsupportedNodeKind):
            generate_fixtures(op, seed=1)
