from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List

from markupsafe import Markup

DEFAULT_NAMESPACE = "cloudprober"


@dataclass(frozen=True)
class Formatter:
    """Rendering configuration threaded through message expansion.

    Every with_* helper returns a new Formatter, so recursive calls never
    see each other's depth or prefix.
    """

    yaml: bool = False
    depth: int = 0
    prefix: str = ""
    rel_path: str = ""
    home_url: str = ""
    namespace: str = DEFAULT_NAMESPACE

    def with_yaml(self, yaml: bool) -> Formatter:
        return replace(self, yaml=yaml)

    def with_depth(self, depth: int) -> Formatter:
        return replace(self, depth=depth)

    def with_prefix(self, prefix: str) -> Formatter:
        return replace(self, prefix=prefix)

    def with_rel_path(self, rel_path: str) -> Formatter:
        return replace(self, rel_path=rel_path)

    def with_home_url(self, home_url: str) -> Formatter:
        return replace(self, home_url=home_url)

    def with_namespace(self, namespace: str) -> Formatter:
        return replace(self, namespace=namespace)


@dataclass(frozen=True)
class Token:
    """One line of rendered documentation."""

    prefix: str = ""
    text: str = ""
    kind: str = ""
    comment: str = ""
    default: str = ""

    message_header: bool = False
    no_extra_line: bool = False
    yaml: bool = False

    # Filled by the token finisher
    url: str = ""
    suffix: Markup = Markup("")
    text_html: Markup = Markup("")
    sep: str = ""
    extra_line: str = ""


@dataclass
class MessageDocs:
    name: str
    tokens: List[Token] = field(default_factory=list)
