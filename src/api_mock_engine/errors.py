"""Exception hierarchy shared by the loader, generator, dispatcher and server."""


class MockEngineError(Exception):
    """Base class for all api-mock-engine errors."""


class SchemaLoadError(MockEngineError):
    """The schema file could not be read or normalized."""


class SchemaLookupFailure(MockEngineError):
    """An inbound (path, method) pair has no operation in the schema."""

    status_code = 404


class PathNotFound(SchemaLookupFailure):
    def __init__(self, path: str):
        super().__init__(f"No operation declared for path {path}")
        self.path = path


class MethodNotAllowed(SchemaLookupFailure):
    status_code = 405

    def __init__(self, path: str, method: str, allowed: list[str]):
        super().__init__(f"Method {method} not allowed for path {path}")
        self.path = path
        self.method = method
        self.allowed = allowed


class GenerationError(MockEngineError):
    """A typed node could not be turned into a value."""


class UnsupportedNodeKind(GenerationError):
    pass


class NilNode(GenerationError):
    pass


class SelfReferencingSchema(UnsupportedNodeKind):
    """A $ref chain leads back to a schema that is still being normalized."""


class GenerationDepthExceeded(GenerationError):
    pass


class EncodingFailure(MockEngineError):
    """A generated payload could not be serialized to JSON."""
