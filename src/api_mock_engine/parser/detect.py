"""Auto-detect API schema format."""

import json
import re
from pathlib import Path

import yaml

GRAPHQL_PATTERN = re.compile(r"^\s*(type|schema|interface|input|enum|scalar|union)\s+\w*\s*[{@=]?", re.MULTILINE)


def detect_format(file_path: Path) -> str:
    """Detect the format of an API schema file.

    Returns: 'openapi', 'swagger', 'graphql', or 'unknown'.
    """
    text = file_path.read_text(encoding="utf-8")

    if file_path.suffix in (".graphql", ".gql"):
        return "graphql"

    # Try YAML/JSON parsing
    try:
        data = yaml.safe_load(text)
        fmt = _classify(data)
        if fmt:
            return fmt
    except yaml.YAMLError:
        pass

    # Try JSON specifically (for files not parseable as YAML)
    try:
        fmt = _classify(json.loads(text))
        if fmt:
            return fmt
    except (json.JSONDecodeError, ValueError):
        pass

    if GRAPHQL_PATTERN.search(text) and "{" in text:
        return "graphql"
    return "unknown"


def _classify(data) -> str | None:
    if not isinstance(data, dict):
        return None
    if "openapi" in data:
        return "openapi"
    if "swagger" in data:
        return "swagger"
    return None
