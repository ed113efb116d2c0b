"""Recursive expansion of a message descriptor into documentation tokens.

dump_message walks the fields of a message in declaration order. Message
typed fields are expanded inline while the formatter depth is above 1;
otherwise they become a single token and their type is reported back so
the caller can document it separately.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Set, Tuple

from google.protobuf.descriptor import Descriptor, FieldDescriptor

from protodoc.format import field_to_token, final_token, in_oneof_group, is_message_field
from protodoc.models import Formatter, Token
from protodoc.registry import SchemaRegistry


def dump_extended_message(
    registry: SchemaRegistry,
    fld: FieldDescriptor,
    f: Formatter,
) -> Tuple[List[Token], List[str]]:
    """Expand a message-typed field inline as a nested block."""
    next_message_names = [fld.message_type.full_name]

    header = replace(final_token(registry, fld, f), message_header=True, no_extra_line=True)
    lines = [header]

    new_prefix = f.prefix + "  "
    if fld.is_repeated and f.yaml:
        new_prefix = f.prefix + "    "
    toks, nxt = dump_message(registry, fld.message_type, f.with_depth(f.depth - 1).with_prefix(new_prefix))
    if toks and f.yaml and fld.is_repeated:
        toks[0] = replace(toks[0], prefix=f.prefix + "  - ")
    lines.extend(toks)

    # textpb blocks are closed with "}", with a single line break before it.
    if not f.yaml:
        lines[-1] = replace(lines[-1], no_extra_line=True)
        lines.append(Token(prefix=f.prefix, text="}"))
    next_message_names.extend(nxt)

    return lines, next_message_names


def dump_message(
    registry: SchemaRegistry,
    md: Descriptor,
    f: Formatter,
) -> Tuple[List[Token], List[str]]:
    """Expand a message into tokens.

    Returns the tokens and the full names of referenced messages that were
    not expanded inline, in encounter order (possibly with repeats).
    """
    next_message_names: List[str] = []
    lines: List[Token] = []

    # oneof groups already emitted for this message
    done: Set[str] = set()

    for fld in md.fields:
        if is_message_field(fld) and f.depth > 1 and not in_oneof_group(fld):
            toks, nxt = dump_extended_message(registry, fld, f)
            lines.extend(toks)
            next_message_names.extend(nxt)
            continue

        tok = field_to_token(registry, fld, f, done)
        if tok is not None:
            lines.append(tok)
        if is_message_field(fld):
            next_message_names.append(fld.message_type.full_name)

    return lines, next_message_names
