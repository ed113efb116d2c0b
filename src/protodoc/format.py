"""Formatting of individual fields, enums and oneof groups into tokens."""

from __future__ import annotations

import struct
from dataclasses import replace
from typing import Dict, List, Optional, Set

from google.protobuf.descriptor import EnumDescriptor, FieldDescriptor, OneofDescriptor
from markupsafe import Markup

from protodoc.finisher import kind_to_url
from protodoc.models import Formatter, Token
from protodoc.registry import SchemaRegistry

# Field type -> kind keyword shown in the docs
KIND_NAMES: Dict[int, str] = {
    FieldDescriptor.TYPE_DOUBLE: "double",
    FieldDescriptor.TYPE_FLOAT: "float",
    FieldDescriptor.TYPE_INT64: "int64",
    FieldDescriptor.TYPE_UINT64: "uint64",
    FieldDescriptor.TYPE_INT32: "int32",
    FieldDescriptor.TYPE_FIXED64: "fixed64",
    FieldDescriptor.TYPE_FIXED32: "fixed32",
    FieldDescriptor.TYPE_BOOL: "bool",
    FieldDescriptor.TYPE_STRING: "string",
    FieldDescriptor.TYPE_GROUP: "group",
    FieldDescriptor.TYPE_MESSAGE: "message",
    FieldDescriptor.TYPE_BYTES: "bytes",
    FieldDescriptor.TYPE_UINT32: "uint32",
    FieldDescriptor.TYPE_ENUM: "enum",
    FieldDescriptor.TYPE_SFIXED32: "sfixed32",
    FieldDescriptor.TYPE_SFIXED64: "sfixed64",
    FieldDescriptor.TYPE_SINT32: "sint32",
    FieldDescriptor.TYPE_SINT64: "sint64",
}


def is_message_field(fld: FieldDescriptor) -> bool:
    return fld.type == FieldDescriptor.TYPE_MESSAGE


def in_oneof_group(fld: FieldDescriptor) -> bool:
    """True for members of a real oneof.

    proto3 optional fields live in a single-member oneof and are treated as
    ordinary fields.
    """
    oneof = fld.containing_oneof
    return oneof is not None and len(oneof.fields) > 1


def display_name(fld: FieldDescriptor, f: Formatter) -> str:
    return fld.json_name if f.yaml else fld.name


def format_default(fld: FieldDescriptor) -> str:
    """Canonical string form of a field's declared default value."""
    value = fld.default_value
    if fld.type == FieldDescriptor.TYPE_BOOL:
        return "true" if value else "false"
    if fld.type == FieldDescriptor.TYPE_ENUM:
        enum_value = fld.enum_type.values_by_number.get(value)
        return enum_value.name if enum_value is not None else str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        if fld.type == FieldDescriptor.TYPE_FLOAT:
            return _shortest_float32(value)
        return repr(value)
    return str(value)


def _shortest_float32(value: float) -> str:
    """Shortest decimal string that reads back as the same 32-bit float."""
    packed = struct.pack("<f", value)
    for precision in range(1, 10):
        text = "%.*g" % (precision, value)
        if struct.pack("<f", float(text)) == packed:
            return text
    return repr(value)


def format_comment(registry: SchemaRegistry, full_name: str, f: Formatter) -> str:
    """Re-indent a descriptor's leading comment as "#" lines under f.prefix."""
    comment = registry.comment_for(full_name)
    if not comment.strip():
        return ""

    lines = comment.split("\n")
    if not lines[-1].strip():
        lines = lines[:-1]
    return "\n".join(f.prefix + "#" + line for line in lines)


def final_token(registry: SchemaRegistry, fld: FieldDescriptor, f: Formatter, nocomment: bool = False) -> Token:
    """Build the leaf token for a field: name, kind, default and comment."""
    comment = "" if nocomment else format_comment(registry, fld.full_name, f)

    kind = KIND_NAMES.get(fld.type, "")
    if is_message_field(fld):
        kind = fld.message_type.full_name

    return Token(
        yaml=f.yaml,
        prefix=f.prefix,
        comment=comment,
        kind=kind,
        text=display_name(fld, f),
        default=format_default(fld) if fld.has_default_value else "",
    )


def _enum_values(ed: EnumDescriptor) -> str:
    return "|".join(v.name for v in ed.values)


def format_enum(registry: SchemaRegistry, ed: EnumDescriptor, name: str, f: Formatter) -> Token:
    return Token(
        yaml=f.yaml,
        comment=format_comment(registry, ed.full_name, f),
        kind="enum",
        prefix=f.prefix,
        text=f"{name}: ({_enum_values(ed)})",
    )


def format_oneof(registry: SchemaRegistry, ood: OneofDescriptor, f: Formatter) -> Token:
    """Render all alternatives of a oneof group as one bracketed token.

    The text is pre-built HTML; every second alternative starts a new line
    aligned under the opening bracket.
    """
    alternatives: List[Markup] = []
    for fld in ood.fields:
        tok = final_token(registry, fld, f, nocomment=True)

        if fld.enum_type is not None:
            alternatives.append(Markup("{} ({})").format(tok.text, _enum_values(fld.enum_type)))
            continue

        url = kind_to_url(tok.kind, f)
        if url:
            alternatives.append(Markup('{} &lt;<a href="{}">{}</a>&gt;').format(tok.text, url, tok.kind))
        else:
            alternatives.append(Markup("{} &lt;{}&gt;").format(tok.text, tok.kind))

    continuation = Markup("\n") + Markup((f.prefix + " ").replace(" ", "&nbsp;"))
    text = Markup("[")
    for i, alternative in enumerate(alternatives):
        if i != 0 and i % 2 == 0:
            text += continuation
        text += alternative
        text += Markup("]") if i == len(alternatives) - 1 else Markup(" | ")

    return Token(
        yaml=f.yaml,
        comment=format_comment(registry, ood.full_name, f),
        kind="oneof",
        prefix=f.prefix,
        text_html=text,
    )


def field_to_token(
    registry: SchemaRegistry,
    fld: FieldDescriptor,
    f: Formatter,
    done: Set[str],
) -> Optional[Token]:
    """Token for a field that is not expanded inline.

    Returns None for a oneof member whose group was already emitted; done
    holds the groups emitted so far for the message being expanded.
    """
    if in_oneof_group(fld):
        oneof = fld.containing_oneof
        if oneof.full_name in done:
            return None
        done.add(oneof.full_name)
        return format_oneof(registry, oneof, f)

    if fld.enum_type is not None:
        tok = format_enum(registry, fld.enum_type, display_name(fld, f), f)
        return replace(tok, comment=format_comment(registry, fld.full_name, f))

    return final_token(registry, fld, f)
