"""OpenAPI / Swagger document loader.

Parses OpenAPI 3.x and Swagger 2.0 documents into the normalized Schema
model. Each JSON schema found in a request body or response is resolved
and converted into a TypedNode tree once, at load time.
"""

import logging
from pathlib import Path

import yaml

from api_mock_engine.errors import SchemaLoadError, SelfReferencingSchema, UnsupportedNodeKind

from .base import (
    HTTP_METHODS,
    ArrayNode,
    BooleanNode,
    IntegerNode,
    NumberNode,
    ObjectNode,
    Operation,
    Param,
    Schema,
    StringNode,
)
from .detect import detect_format

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
STRING_FORMATS = {"date", "date-time", "email", "uuid", "uri"}


def load_schema(file_path: Path) -> Schema:
    """Read a schema file from disk and parse it into a Schema."""
    try:
        fmt = detect_format(file_path)
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SchemaLoadError(f"failed to read {file_path}: {e}") from e

    if fmt == "graphql":
        raise SchemaLoadError(f"{file_path}: GraphQL schemas are not supported")
    if fmt == "unknown":
        raise SchemaLoadError(f"{file_path}: not an OpenAPI or Swagger document")

    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SchemaLoadError(f"failed to parse {file_path}: {e}") from e

    return parse_openapi(doc)


def parse_openapi(doc: dict) -> Schema:
    """Parse an already-loaded OpenAPI/Swagger document into a Schema."""
    if not isinstance(doc, dict):
        raise SchemaLoadError("schema document must be a mapping")
    paths = doc.get("paths")
    if not isinstance(paths, dict):
        raise SchemaLoadError("schema document has no 'paths' section")

    info = doc.get("info") or {}
    kind = "swagger" if "swagger" in doc else "openapi"
    result: dict[str, list[Operation]] = {}

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        shared_params = path_item.get("parameters", [])
        operations = []
        for method, operation in path_item.items():
            if method.upper() not in HTTP_METHODS or not isinstance(operation, dict):
                continue
            raw_params = _merge_parameters(doc, shared_params, operation.get("parameters", []))
            operations.append(
                Operation(
                    method=method.upper(),
                    path=path,
                    summary=operation.get("summary", ""),
                    description=operation.get("description", ""),
                    parameters=_parse_parameters(raw_params),
                    request_body=_parse_request_body(doc, operation, raw_params, method.upper(), path),
                    responses=_parse_responses(doc, operation.get("responses", {}), method.upper(), path),
                    tags=operation.get("tags", []),
                )
            )
        if operations:
            result[path] = operations

    try:
        return Schema(
            kind=kind,
            title=str(info.get("title", "")),
            version=str(doc.get("openapi") or doc.get("swagger") or ""),
            paths=result,
        )
    except ValueError as e:
        raise SchemaLoadError(str(e)) from e


def normalize_node(raw: dict, doc: dict, _seen: tuple[str, ...] = ()):
    """Convert a JSON schema dict into a TypedNode.

    Local ``$ref`` pointers are resolved against ``doc``. A reference that
    leads back to itself raises SelfReferencingSchema, which the operation
    parser treats like any other unsupported node.
    """
    if not isinstance(raw, dict):
        raise UnsupportedNodeKind(f"schema node must be a mapping, got {type(raw).__name__}")

    if "$ref" in raw:
        ref = raw["$ref"]
        if ref in _seen:
            raise SelfReferencingSchema(f"self-referencing schema at {ref}")
        return normalize_node(_resolve_ref(doc, ref), doc, _seen + (ref,))

    if "allOf" in raw:
        return _merge_all_of(raw, doc, _seen)
    for key in ("oneOf", "anyOf"):
        if raw.get(key):
            return normalize_node(raw[key][0], doc, _seen)

    node_type = raw.get("type")
    if isinstance(node_type, list):
        # OpenAPI 3.1 style: ["string", "null"]
        node_type = next((t for t in node_type if t != "null"), None)
    if node_type is None:
        node_type = "array" if "items" in raw else "object"

    if node_type == "string":
        fmt = raw.get("format")
        return StringNode(
            format=fmt if fmt in STRING_FORMATS else None,
            enum_values=[str(v) for v in raw.get("enum", []) if v is not None],
        )
    if node_type == "integer":
        return IntegerNode(minimum=_int_or_none(raw.get("minimum")), maximum=_int_or_none(raw.get("maximum")))
    if node_type == "number":
        return NumberNode(minimum=_float_or_none(raw.get("minimum")), maximum=_float_or_none(raw.get("maximum")))
    if node_type == "boolean":
        return BooleanNode()
    if node_type == "array":
        items = raw.get("items")
        return ArrayNode(
            items=normalize_node(items, doc, _seen) if items is not None else None,
            min_items=_int_or_none(raw.get("minItems")),
            max_items=_int_or_none(raw.get("maxItems")),
        )
    if node_type == "object":
        return ObjectNode(properties=_normalize_properties(raw.get("properties") or {}, doc, _seen))
    raise UnsupportedNodeKind(f"unsupported schema type: {node_type}")


def _normalize_properties(props: dict, doc: dict, seen: tuple[str, ...]) -> list:
    result = []
    for name, prop in props.items():
        try:
            result.append((str(name), normalize_node(prop, doc, seen)))
        except UnsupportedNodeKind as e:
            logger.warning("Dropping property %s: %s", name, e)
            result.append((str(name), None))
    return result


def _merge_all_of(raw: dict, doc: dict, seen: tuple[str, ...]):
    parts = [normalize_node(part, doc, seen) for part in raw["allOf"]]
    objects = [p for p in parts if isinstance(p, ObjectNode)]
    if not objects:
        return parts[0] if parts else ObjectNode()
    merged: dict = {}
    for obj in objects:
        merged.update(dict(obj.properties))
    if raw.get("properties"):
        merged.update(dict(_normalize_properties(raw["properties"], doc, seen)))
    return ObjectNode(properties=list(merged.items()))


def _resolve_ref(doc: dict, ref: str) -> dict:
    if not ref.startswith("#/"):
        raise SchemaLoadError(f"only local references are supported: {ref}")
    node = doc
    for part in ref[2:].split("/"):
        part = part.replace("~1", "/").replace("~0", "~")
        if not isinstance(node, dict) or part not in node:
            raise SchemaLoadError(f"unresolvable reference: {ref}")
        node = node[part]
    return node


def _merge_parameters(doc: dict, shared: list[dict], own: list[dict]) -> list[dict]:
    """Operation-level parameters override path-level ones with the same name and location."""
    merged: dict[tuple, dict] = {}
    for p in list(shared) + list(own):
        if "$ref" in p:
            p = _resolve_ref(doc, p["$ref"])
        merged[(p.get("name"), p.get("in"))] = p
    return list(merged.values())


def _parse_parameters(params: list[dict]) -> list[Param]:
    result = []
    for p in params:
        location = p.get("in", "query")
        if location not in ("query", "path", "header", "cookie"):
            continue  # Swagger 2 body / formData parameters
        schema = p.get("schema", p)
        result.append(
            Param(
                name=p["name"],
                location=location,
                required=p.get("required", location == "path"),
                param_type=schema.get("type", "string") if isinstance(schema.get("type"), str) else "string",
                description=p.get("description", ""),
            )
        )
    return result


def _parse_request_body(doc: dict, operation: dict, params: list[dict], method: str, path: str):
    raw = None
    body = operation.get("requestBody")
    if body:
        if "$ref" in body:
            body = _resolve_ref(doc, body["$ref"])
        raw = _json_schema(body.get("content") or {})
    else:
        for p in params:
            if p.get("in") == "body":
                raw = p.get("schema")
    if raw is None:
        return None
    return _normalize_or_drop(raw, doc, f"request body of {method} {path}")


def _parse_responses(doc: dict, responses: dict, method: str, path: str) -> dict:
    result = {}
    for status_code, resp in responses.items():
        if not isinstance(resp, dict):
            continue
        if "$ref" in resp:
            resp = _resolve_ref(doc, resp["$ref"])
        content = resp.get("content")
        raw = _json_schema(content) if content else resp.get("schema")
        if raw is None:
            continue
        node = _normalize_or_drop(raw, doc, f"{status_code} response of {method} {path}")
        if node is not None:
            result[str(status_code)] = node
    return result


def _json_schema(content: dict) -> dict | None:
    media = content.get(JSON_CONTENT_TYPE)
    if media is None:
        # Fallback: any JSON-flavoured media type such as application/problem+json
        media = next((m for ct, m in content.items() if ct.endswith("+json")), None)
    if not media:
        return None
    return media.get("schema")


def _normalize_or_drop(raw: dict, doc: dict, where: str):
    try:
        return normalize_node(raw, doc)
    except UnsupportedNodeKind as e:
        logger.warning("Ignoring %s: %s", where, e)
        return None


def _int_or_none(value) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    return int(value)


def _float_or_none(value) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    return float(value)
