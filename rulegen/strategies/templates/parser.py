"""Placeholder parser for alert-rule fragments.

Splits fragment text into typed segments:

- `{{ name }}` with a bare identifier is a profile placeholder.
- Any other `{{ ... }}` expression (`{{ $labels.name }}`, `{{ .Value }}`,
  `{{ end }}`) is passthrough text owned by the alerting system.
- Text between `{% raw %}` and `{% endraw %}` is passthrough, markers removed.

A `}}` that closes no `{{` is plain text, as in nested YAML flow mappings.
"""

import re

from rulegen.interfaces.template_set import (
    LiteralText,
    PassthroughText,
    ProfilePlaceholder,
    Segment,
    TemplateError,
)

_TOKEN = re.compile(r"\{%-?\s*(?P<block>raw|endraw)\s*-?%\}|(?P<open>\{\{)")
_END_RAW = re.compile(r"\{%-?\s*endraw\s*-?%\}")
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Go template keywords that look like identifiers but belong to the alerting system.
GO_TEMPLATE_KEYWORDS = frozenset({"end", "else", "break", "continue", "nil", "true", "false"})


def _line(text: str, pos: int) -> int:
    return text.count("\n", 0, pos) + 1


def parse_fragment(text: str, source: str = "") -> tuple[Segment, ...]:
    """Parse fragment text into literal, placeholder and passthrough segments.

    Args:
        text: Raw fragment text.
        source: File name used in error messages.

    Returns:
        Segments in document order. Adjacent literal text is merged.

    Raises:
        TemplateError: On unbalanced or empty placeholder syntax.
    """
    segments: list[Segment] = []
    literal: list[str] = []

    def flush() -> None:
        if literal:
            segments.append(LiteralText("".join(literal)))
            literal.clear()

    pos = 0
    while True:
        match = _TOKEN.search(text, pos)
        if match is None:
            literal.append(text[pos:])
            break

        literal.append(text[pos:match.start()])

        if match.group("block") == "raw":
            end = _END_RAW.search(text, match.end())
            if end is None:
                raise TemplateError(
                    f"unterminated raw block opened on line {_line(text, match.start())}",
                    source=source,
                )
            flush()
            segments.append(PassthroughText(text[match.end():end.start()]))
            pos = end.end()
            continue

        if match.group("block") == "endraw":
            raise TemplateError(
                f"endraw without raw on line {_line(text, match.start())}", source=source
            )

        close = text.find("}}", match.end())
        if close == -1:
            raise TemplateError(
                f"unclosed '{{{{' on line {_line(text, match.start())}", source=source
            )
        inner = text[match.end():close]
        if "{{" in inner:
            raise TemplateError(
                f"nested '{{{{' on line {_line(text, match.start())}", source=source
            )
        expression = inner.strip()
        if not expression:
            raise TemplateError(
                f"empty placeholder on line {_line(text, match.start())}", source=source
            )

        raw = text[match.start():close + 2]
        flush()
        if _IDENTIFIER.match(expression) and expression not in GO_TEMPLATE_KEYWORDS:
            segments.append(ProfilePlaceholder(name=expression, raw=raw))
        else:
            segments.append(PassthroughText(raw))
        pos = close + 2

    flush()
    return tuple(s for s in segments if not (isinstance(s, LiteralText) and not s.text))


def render_value(value: object) -> str:
    """Render a profile value the way Helm prints scalars."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def substitute(segments: tuple[Segment, ...], values: dict[str, object]) -> tuple[str, list[str]]:
    """Resolve profile placeholders against a value mapping.

    Passthrough segments are emitted verbatim.

    Returns:
        The rendered text and the sorted names of unresolved placeholders.
    """
    parts: list[str] = []
    missing: set[str] = set()
    for segment in segments:
        if isinstance(segment, ProfilePlaceholder):
            if segment.name in values:
                parts.append(render_value(values[segment.name]))
            else:
                missing.add(segment.name)
                parts.append(segment.raw)
        else:
            parts.append(segment.text)
    return "".join(parts), sorted(missing)
