"""
Modifiers seen before a declaration: keywords and annotations.
"""

from dataclasses import dataclass, field
from typing import Optional

from .elements import AccessPermission
from .expression import Expression


@dataclass
class Modifier:
    """Base for modifiers; start/end are the source span, used for masking."""
    start: int = field(default=-1, compare=False)
    end: int = field(default=-1, compare=False)

    def is_keyword(self, keyword: str) -> bool:
        return False

    def is_annotation(self, name: str) -> bool:
        return False


@dataclass
class KeywordModifier(Modifier):
    keyword: str = ""

    def is_keyword(self, keyword: str) -> bool:
        return self.keyword == keyword

    def __str__(self) -> str:
        return self.keyword


@dataclass
class AnnotationModifier(Modifier):
    """@Name, optionally with parameters that arrive after construction."""
    name: str = ""
    params: Optional[list[Expression]] = None

    def is_annotation(self, name: str) -> bool:
        return self.name == name

    def set_params(self, params: list[Expression]):
        self.params = list(params)

    def __str__(self) -> str:
        if self.params is None:
            return self.name
        return self.name + "(" + ", ".join(p.java for p in self.params) + ")"


def remove_keywords(modifiers: list[Modifier], keyword: str) -> bool:
    """Remove every occurrence of keyword in place; True if any were present."""
    found = any(m.is_keyword(keyword) for m in modifiers)
    modifiers[:] = [m for m in modifiers if not m.is_keyword(keyword)]
    return found


def remove_annotations(modifiers: list[Modifier], name: str) -> bool:
    found = any(m.is_annotation(name) for m in modifiers)
    modifiers[:] = [m for m in modifiers if not m.is_annotation(name)]
    return found


def remove_access(modifiers: list[Modifier],
                  default: Optional[AccessPermission]) -> Optional[AccessPermission]:
    """
    Strip private/protected/public from modifiers (in place) and return
    the permission they denote. Package-visible items get the default.
    All three are removed even if several are present; the last in
    private/protected/public order wins.
    """
    permission = default
    if remove_keywords(modifiers, "private"):
        permission = AccessPermission.PRIVATE
    if remove_keywords(modifiers, "protected"):
        permission = AccessPermission.PROTECTED
    if remove_keywords(modifiers, "public"):
        permission = AccessPermission.PUBLIC
    return permission
