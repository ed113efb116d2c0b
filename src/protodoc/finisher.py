from __future__ import annotations

import posixpath
from dataclasses import replace
from typing import List
from urllib.parse import urljoin

from markupsafe import Markup, escape

from protodoc.models import Formatter, Token


def kind_to_url(kind: str, f: Formatter) -> str:
    """Link target for a type name in the root namespace, or "".

    "<ns>.<pkg>.<Rest>" links to the <pkg> document, anchored at the full
    name with dots replaced by underscores.
    """
    if not kind.startswith(f.namespace + "."):
        return ""
    parts = kind.split(".", 2)
    if len(parts) < 3:
        return ""

    target = posixpath.normpath(posixpath.join(f.rel_path, parts[1] + "#" + kind.replace(".", "_")))
    if f.home_url:
        return urljoin(f.home_url.rstrip("/") + "/", target)
    return target


def _finish_token(tok: Token, f: Formatter) -> Token:
    if tok.message_header:
        suffix = Markup(":") if tok.yaml else Markup(" {")
        sep = " "
    else:
        suffix = Markup(" | default: {}").format(tok.default) if tok.default else Markup("")
        sep = ": "

    return replace(
        tok,
        url=kind_to_url(tok.kind, f),
        suffix=suffix,
        sep=sep,
        text_html=tok.text_html or escape(tok.text),
        extra_line="" if tok.no_extra_line else "\n",
    )


def process_tokens_for_html(toks: List[Token], f: Formatter) -> List[Token]:
    """Fill in the rendering-only fields of each token.

    Returns new tokens; the input tokens are left as they are. Oneof tokens
    already carry their own markup in text_html and keep it.
    """
    return [_finish_token(tok, f) for tok in toks]
