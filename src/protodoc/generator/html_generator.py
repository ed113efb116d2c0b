from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape

from protodoc.expander import dump_message
from protodoc.finisher import process_tokens_for_html
from protodoc.models import Formatter, MessageDocs, Token
from protodoc.packages import arrange_into_packages
from protodoc.registry import SchemaRegistry

# Documents are written to <out_dir>/<name>/index.html; the root message
# document is named "index" by callers and lands under "overview".
OVERVIEW_DOC = "index"
OVERVIEW_DIR = "overview"


def _get_template_env() -> Environment:
    template_dir = Path(__file__).parent.parent / "templates"
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "html.j2"]),
        keep_trailing_newline=True,
    )


def render_doc(message_docs: List[MessageDocs]) -> str:
    """Render the tokens of one or more messages as an HTML fragment."""
    env = _get_template_env()
    template = env.get_template("doc.html.j2")
    return template.render(docs=message_docs)


def write_doc(pkg: str, message_docs: List[MessageDocs], out_dir: str) -> str:
    """Write one document and return its path."""
    if pkg == OVERVIEW_DOC:
        pkg = OVERVIEW_DIR

    pkg_dir = os.path.join(out_dir, pkg)
    os.makedirs(pkg_dir, exist_ok=True)

    file_path = os.path.join(pkg_dir, "index.html")
    Path(file_path).write_text(render_doc(message_docs), encoding="utf-8")
    return file_path


def generate_overview(
    registry: SchemaRegistry,
    root_message: str,
    f: Formatter,
    out_dir: str,
) -> Tuple[str, List[str]]:
    """Document the root message two levels deep.

    Returns the written path and the names of messages referenced from it.
    """
    md = registry.find_message(root_message)
    toks, next_message_names = dump_message(registry, md, f.with_depth(2))

    docs = MessageDocs(name="", tokens=process_tokens_for_html(toks, f))
    return write_doc(OVERVIEW_DOC, [docs], out_dir), next_message_names


def expand_referenced_messages(
    registry: SchemaRegistry,
    msg_names: Iterable[str],
    f: Formatter,
) -> Dict[str, List[Token]]:
    """Expand every message reachable from msg_names one level deep.

    Each message is expanded once, so self-referencing schemas terminate.
    """
    f = f.with_depth(1)
    msg_to_doc: Dict[str, List[Token]] = {}

    pending = list(msg_names)
    while pending:
        next_loop: List[str] = []
        for msg_name in pending:
            if msg_name in msg_to_doc:
                continue
            toks, nxt = dump_message(registry, registry.find_message(msg_name), f)
            msg_to_doc[msg_name] = toks
            next_loop.extend(nxt)
        pending = next_loop

    return msg_to_doc


def generate_package_docs(
    registry: SchemaRegistry,
    msg_names: Iterable[str],
    f: Formatter,
    out_dir: str,
) -> List[str]:
    """Write one document per package for all referenced messages.

    Returns list of generated file paths.
    """
    msg_to_doc = expand_referenced_messages(registry, msg_names, f)
    packages = arrange_into_packages(msg_to_doc, f.namespace)

    generated: List[str] = []
    for pkg in sorted(packages):
        docs = [
            MessageDocs(name=name, tokens=process_tokens_for_html(msg_to_doc[name], f))
            for name in sorted(packages[pkg])
        ]
        generated.append(write_doc(pkg, docs, out_dir))

    return generated
