"""
Conversion warnings, error types and comment text processing.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import reduce
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ConversionError(Exception):
    """Event stream does not match the converter's state."""
    pass


class ParseFailure(Exception):
    """The scanner could not recognise the input."""

    def __init__(self, position: int, message: str):
        super().__init__(f"Parse failure at {position}: {message}")
        self.position = position
        self.message = message


class ConversionWarning(ABC):
    """A non-fatal problem found while converting."""

    @property
    @abstractmethod
    def message(self) -> str:
        ...

    @property
    def identifier(self) -> str:
        """Stable text used for warning comments in testing mode."""
        return "WARNING:" + type(self).__name__

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class UnsupportedModifier(ConversionWarning):
    context: str
    modifier: str

    @property
    def message(self) -> str:
        return f"Unsupported {self.context} modifier: {self.modifier}"


@dataclass(frozen=True)
class UnsupportedFeature(ConversionWarning):
    feature: str

    @property
    def message(self) -> str:
        return f"Unsupported feature: {self.feature}"


CommentSink = Callable[[str], None]


class WarningManager:
    """Records warnings and mirrors each one into the tree as a comment."""

    def __init__(self, testing: bool, default_sink: CommentSink):
        self.testing = testing
        self.warnings: list[ConversionWarning] = []
        self._default_sink = default_sink

    def add(self, warning: ConversionWarning, comment_add: Optional[CommentSink] = None):
        self.warnings.append(warning)
        logger.info("Conversion warning: %s", warning.message)
        text = "// " + (warning.identifier if self.testing else warning.message)
        (comment_add or self._default_sink)(text)


def javadoc_to_string(comment: str) -> str:
    """Strip the delimiters and leading '*' decoration from a block comment."""
    if comment.startswith("/**"):
        body = comment[3:]
    elif comment.startswith("/*"):
        body = comment[2:]
    else:
        body = comment
    if body.endswith("*/"):
        body = body[:-2]
    lines = []
    for line in body.splitlines():
        stripped = line.lstrip()
        if stripped.startswith("*"):
            stripped = stripped[1:]
        lines.append(stripped)
    return "\n".join(lines)


def _join_comment_lines(a: str, b: str) -> str:
    # A blank line is a paragraph break; other line breaks become spaces.
    a = "\n" if not a else a
    if a.endswith("\n"):
        return a + ("\n" if not b else b)
    if not b:
        return a + "\n"
    return a + " " + b


def process_comment(comment: str) -> str:
    """Turn raw comment source into the text of a comment element."""
    if comment.startswith("//"):
        comment = comment[2:].strip()
    else:
        comment = javadoc_to_string(comment).strip()
    lines = [line.strip() for line in comment.splitlines()]
    if not lines:
        return ""
    return reduce(_join_comment_lines, lines)
