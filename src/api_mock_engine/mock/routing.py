"""Path templates: literal/variable segments parsed once per schema path."""

import re

from pydantic import BaseModel, ConfigDict

VARIABLE_PATTERN = re.compile(r"\{([^{}/]+)\}")


class Segment(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    variables: tuple[str, ...] = ()

    @property
    def is_variable(self) -> bool:
        return bool(self.variables)


class PathTemplate(BaseModel):
    """A parsed path template such as ``/pets/{petId}``."""

    model_config = ConfigDict(frozen=True)

    template: str
    segments: tuple[Segment, ...]

    @classmethod
    def parse(cls, template: str) -> "PathTemplate":
        segments = tuple(
            Segment(text=part, variables=tuple(VARIABLE_PATTERN.findall(part)))
            for part in _split(template)
        )
        return cls(template=template, segments=segments)

    @property
    def is_single_resource(self) -> bool:
        """A template with any variable segment addresses one resource."""
        return any(seg.is_variable for seg in self.segments)

    def match(self, path: str) -> dict[str, str] | None:
        """Return the variable values if ``path`` fits this template, else None."""
        parts = _split(path)
        if len(parts) != len(self.segments):
            return None
        params: dict[str, str] = {}
        for seg, part in zip(self.segments, parts):
            if not seg.is_variable:
                if seg.text != part:
                    return None
                continue
            m = _segment_regex(seg.text).fullmatch(part)
            if m is None:
                return None
            params.update(zip(seg.variables, m.groups()))
        return params


def sort_by_specificity(templates: list[PathTemplate]) -> list[PathTemplate]:
    """Order templates so literal segments win over variables at the same depth."""
    return sorted(
        templates,
        key=lambda t: (tuple(1 if seg.is_variable else 0 for seg in t.segments), t.template),
    )


def _split(path: str) -> list[str]:
    return [part for part in path.strip("/").split("/") if part]


def _segment_regex(text: str) -> re.Pattern:
    pattern = ""
    last = 0
    for m in VARIABLE_PATTERN.finditer(text):
        pattern += re.escape(text[last:m.start()]) + "([^/]+?)"
        last = m.end()
    pattern += re.escape(text[last:])
    return re.compile(pattern)
