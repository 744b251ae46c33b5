"""Markdown rule document parser.

A rule document is a Markdown file with optional YAML front matter that
sets defaults (``scope``, ``category``, ``severity``) for every rule in the
file. Each level-2 heading starts a rule whose id is the heading text. The
rule body opens with a ``key: value`` metadata block (``scope``,
``category``, ``severity``, ``title``), followed by the rationale prose,
followed by optional ``### Good`` / ``### Bad`` sections holding fenced
code examples and ``### Note`` sections commenting on the preceding
example. Headings inside fenced code are ignored.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeAlias

import yaml

from stylebook.errors import (
    DocumentNotFoundError,
    DocumentParseError,
    RuleValidationError,
)
from stylebook.types import RuleDefinition, Scope

logger = logging.getLogger(__name__)

_FRONT_MATTER_DELIMITER = "---"
_RULE_HEADING = re.compile(r"^##\s+(?P<title>[^#].*?)\s*#*\s*$")
_SUBSECTION_HEADING = re.compile(r"^###\s+(?P<title>.+?)\s*#*\s*$")
_FENCE = re.compile(r"^\s*(?P<marker>`{3,}|~{3,})\s*(?P<info>[^`\s]*)")
_METADATA_LINE = re.compile(r"^(?P<key>[A-Za-z_][\w-]*)\s*:(\s|$)")
_BYTE_ORDER_MARK = "\ufeff"

# Keys a document may set as defaults for all of its rules
_DOCUMENT_DEFAULTS = ("scope", "category", "severity")
# Keys a rule's metadata block may set
_RULE_METADATA = ("scope", "category", "severity", "title")

_GOOD = "good"
_BAD = "bad"
_NOTE = "note"

_Line: TypeAlias = tuple[int, str]


@dataclass
class _RuleSection:
    """Raw lines of one level-2 section."""

    rule_id: str
    line: int
    body: list[_Line] = field(default_factory=list)


def _fence_marker(text: str) -> str | None:
    match = _FENCE.match(text)
    return match.group("marker") if match else None


def _closes_fence(text: str, opening: str) -> bool:
    stripped = text.strip()
    return (
        stripped.startswith(opening[0] * len(opening))
        and not stripped.lstrip(opening[0]).strip()
    )


def _is_metadata_line(text: str) -> bool:
    match = _METADATA_LINE.match(text)
    return match is not None and match.group("key") in _RULE_METADATA


def _tag_fenced_lines(lines: list[_Line]) -> list[tuple[int, str, bool]]:
    """Tag each line with whether it lies outside any fenced code block."""
    tagged: list[tuple[int, str, bool]] = []
    opening: str | None = None
    for number, text in lines:
        if opening is None:
            marker = _fence_marker(text)
            tagged.append((number, text, marker is None))
            opening = marker
        else:
            tagged.append((number, text, False))
            if _closes_fence(text, opening):
                opening = None
    return tagged


class MarkdownRuleParser:
    """Parses Markdown rule documents into rule definitions."""

    def __init__(self, default_scope: Scope | str | None = None) -> None:
        """Initialise the parser.

        Args:
            default_scope: Scope used for rules whose document and metadata
                do not name one

        """
        self._default_scope = default_scope

    def parse_file(self, path: Path | str) -> list[RuleDefinition]:
        """Parse a rule document from disk.

        Raises:
            DocumentNotFoundError: If the file does not exist
            DocumentParseError: If the file cannot be read or parsed

        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8-sig")
        except FileNotFoundError as e:
            raise DocumentNotFoundError(f"Rule document not found: {path}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentParseError(f"Failed to read rule document: {e}", path) from e
        return self.parse(text, source=path)

    def parse(self, text: str, source: Path | str = "<string>") -> list[RuleDefinition]:
        """Parse rule document text.

        Args:
            text: Markdown document content
            source: Name used in rule ``source`` fields and error messages

        Returns:
            Rules in document order

        Raises:
            DocumentParseError: If the front matter, a metadata block or a
                rule is malformed

        """
        text = text.removeprefix(_BYTE_ORDER_MARK)
        lines = list(enumerate(text.splitlines(), start=1))
        defaults, body = self._split_front_matter(lines, source)
        sections = self._split_sections(body)

        rules = [self._build_rule(section, defaults, source) for section in sections]
        logger.debug("Parsed %d rules from %s", len(rules), source)
        return rules

    def _split_front_matter(
        self, lines: list[_Line], source: Path | str
    ) -> tuple[dict[str, Any], list[_Line]]:
        if not lines or lines[0][1].strip() != _FRONT_MATTER_DELIMITER:
            return {}, lines

        for index in range(1, len(lines)):
            if lines[index][1].strip() == _FRONT_MATTER_DELIMITER:
                front = _load_mapping(lines[1:index], source, "front matter")
                defaults = {
                    key: value
                    for key, value in front.items()
                    if key in _DOCUMENT_DEFAULTS and value is not None
                }
                return defaults, lines[index + 1 :]

        raise DocumentParseError("Unterminated front matter", source, lines[0][0])

    def _split_sections(self, lines: list[_Line]) -> list[_RuleSection]:
        sections: list[_RuleSection] = []
        for number, text, outside in _tag_fenced_lines(lines):
            match = _RULE_HEADING.match(text) if outside else None
            if match:
                sections.append(_RuleSection(match.group("title"), number))
            elif sections:
                sections[-1].body.append((number, text))
        return sections

    def _build_rule(
        self, section: _RuleSection, defaults: dict[str, Any], source: Path | str
    ) -> RuleDefinition:
        metadata, remaining = self._split_metadata(section, source)
        rationale, examples = self._split_body(remaining, source)

        properties: dict[str, Any] = {}
        if self._default_scope is not None:
            properties["scope"] = self._default_scope
        properties.update(defaults)
        properties.update(metadata)
        properties["id"] = section.rule_id
        properties["rationale"] = rationale
        properties["examples"] = examples
        properties["source"] = f"{source}:{section.line}"

        try:
            return RuleDefinition.from_properties(properties)
        except RuleValidationError as e:
            raise DocumentParseError(str(e), source, section.line) from e

    def _split_metadata(
        self, section: _RuleSection, source: Path | str
    ) -> tuple[dict[str, Any], list[_Line]]:
        body = section.body
        start = 0
        while start < len(body) and not body[start][1].strip():
            start += 1

        # Only recognised keys are metadata; prose such as "Note: ..." is rationale
        end = start
        while end < len(body) and _is_metadata_line(body[end][1]):
            end += 1

        if end == start:
            return {}, body[start:]

        metadata = _load_mapping(body[start:end], source, "rule metadata")
        return {k: v for k, v in metadata.items() if v is not None}, body[end:]

    def _split_body(
        self, lines: list[_Line], source: Path | str
    ) -> tuple[str, list[dict[str, Any]]]:
        rationale: list[str] = []
        examples: list[dict[str, Any]] = []
        kind: str | None = None
        heading_line = 0
        block: list[_Line] = []

        def flush() -> None:
            if kind is None:
                return
            if kind == _NOTE:
                note = "\n".join(text for _, text in block).strip()
                if not note:
                    return
                if examples:
                    examples[-1]["note"] = note
                else:
                    rationale.append(note)
                return

            language, snippet = _first_code_block(block)
            if snippet is None:
                raise DocumentParseError(
                    f"'### {kind.capitalize()}' section has no fenced code block",
                    source,
                    heading_line,
                )
            if examples and kind not in examples[-1] and "note" not in examples[-1]:
                current = examples[-1]
            else:
                current = {}
                examples.append(current)
            current[kind] = snippet
            if language and "language" not in current:
                current["language"] = language

        for number, text, outside in _tag_fenced_lines(lines):
            match = _SUBSECTION_HEADING.match(text) if outside else None
            if match is None:
                if kind is None:
                    rationale.append(text)
                else:
                    block.append((number, text))
                continue

            flush()
            title = match.group("title").strip().lower()
            if title in (_GOOD, _BAD, _NOTE):
                kind, heading_line, block = title, number, []
            else:
                # Prose subsections belong to the rationale
                kind, block = None, []
                rationale.append(text)
        flush()

        return "\n".join(rationale).strip(), examples


def _first_code_block(block: list[_Line]) -> tuple[str | None, str | None]:
    """Return the language and content of the first fenced block in ``block``."""
    opening: str | None = None
    language: str | None = None
    content: list[str] = []
    for _, text in block:
        if opening is None:
            match = _FENCE.match(text)
            if match:
                opening = match.group("marker")
                language = match.group("info") or None
        elif _closes_fence(text, opening):
            return language, "\n".join(content)
        else:
            content.append(text)
    if opening is not None:
        # Unterminated fence runs to the end of the section
        return language, "\n".join(content)
    return None, None


def _load_mapping(lines: list[_Line], source: Path | str, what: str) -> dict[str, Any]:
    """Parse YAML lines that must form a mapping."""
    first_line = lines[0][0] if lines else None
    text = "\n".join(line for _, line in lines)
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line = first_line + mark.line if mark is not None and first_line else first_line
        raise DocumentParseError(f"Invalid YAML in {what}: {e}", source, line) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise DocumentParseError(f"{what.capitalize()} must be a mapping", source, first_line)
    return {str(key): value for key, value in data.items()}
