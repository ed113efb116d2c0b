"""Read-only lookup service over loaded protobuf descriptors.

The registry owns its own DescriptorPool and an index of leading comments
taken from each file's source_code_info, keyed by fully-qualified name.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Tuple

from google.protobuf import descriptor_pb2, descriptor_pool
from google.protobuf.descriptor import Descriptor
from google.protobuf.message import DecodeError

# Field numbers used in SourceCodeInfo.Location.path
_FILE_MESSAGE_TYPE = 4
_FILE_ENUM_TYPE = 5
_MESSAGE_FIELD = 2
_MESSAGE_NESTED_TYPE = 3
_MESSAGE_ENUM_TYPE = 4
_MESSAGE_ONEOF_DECL = 8


class ProtodocError(Exception):
    """Base class for errors that abort documentation generation."""


class DescriptorNotFoundError(ProtodocError):
    """Raised when a fully-qualified name is absent from the registry."""


class DescriptorLoadError(ProtodocError):
    """Raised when schema files cannot be compiled or loaded."""


def _scoped(name: str, parent: str) -> str:
    return f"{parent}.{name}" if parent else name


class SchemaRegistry:
    def __init__(self, file_set: descriptor_pb2.FileDescriptorSet):
        self._pool = descriptor_pool.DescriptorPool()
        self._comments: Dict[str, str] = {}
        self._add_files(file_set.file)
        for file_proto in file_set.file:
            self._index_comments(file_proto)

    @classmethod
    def from_file(cls, path: str) -> SchemaRegistry:
        """Load a serialized FileDescriptorSet (protoc --descriptor_set_out)."""
        file_set = descriptor_pb2.FileDescriptorSet()
        try:
            file_set.ParseFromString(Path(path).read_bytes())
        except DecodeError as e:
            raise DescriptorLoadError(f"Could not parse descriptor set '{path}': {e}") from e
        return cls(file_set)

    def find_message(self, full_name: str) -> Descriptor:
        try:
            return self._pool.FindMessageTypeByName(full_name)
        except KeyError as e:
            raise DescriptorNotFoundError(f"Message '{full_name}' not found in registry") from e

    def comment_for(self, full_name: str) -> str:
        """Return the leading comment attached to a descriptor, or ""."""
        return self._comments.get(full_name, "")

    def _add_files(self, file_protos: Iterable[descriptor_pb2.FileDescriptorProto]) -> None:
        """Add files to the pool, dependencies first."""
        pending = {fp.name: fp for fp in file_protos}
        added = set()

        while pending:
            progressed = False
            for name, file_proto in list(pending.items()):
                if not all(dep in added for dep in file_proto.dependency):
                    continue
                try:
                    self._pool.AddSerializedFile(file_proto.SerializeToString())
                except (TypeError, ValueError) as e:
                    raise DescriptorLoadError(f"Could not load '{name}': {e}") from e
                added.add(name)
                del pending[name]
                progressed = True

            if not progressed:
                missing = sorted({
                    dep
                    for fp in pending.values()
                    for dep in fp.dependency
                    if dep not in added and dep not in pending
                })
                if missing:
                    raise DescriptorLoadError(f"Unresolved imports: {', '.join(missing)}")
                raise DescriptorLoadError(f"Circular imports between: {', '.join(sorted(pending))}")

    def _index_comments(self, file_proto: descriptor_pb2.FileDescriptorProto) -> None:
        names: Dict[Tuple[int, ...], str] = {}
        package = file_proto.package

        for i, enum_proto in enumerate(file_proto.enum_type):
            names[(_FILE_ENUM_TYPE, i)] = _scoped(enum_proto.name, package)
        for i, msg_proto in enumerate(file_proto.message_type):
            _index_message(msg_proto, (_FILE_MESSAGE_TYPE, i), _scoped(msg_proto.name, package), names)

        for location in file_proto.source_code_info.location:
            full_name = names.get(tuple(location.path))
            if full_name is not None and location.leading_comments:
                self._comments[full_name] = location.leading_comments


def _index_message(
    msg_proto: descriptor_pb2.DescriptorProto,
    path: Tuple[int, ...],
    full_name: str,
    names: Dict[Tuple[int, ...], str],
) -> None:
    """Map source-info paths of a message and its members to full names."""
    names[path] = full_name
    for i, field_proto in enumerate(msg_proto.field):
        names[path + (_MESSAGE_FIELD, i)] = _scoped(field_proto.name, full_name)
    for i, oneof_proto in enumerate(msg_proto.oneof_decl):
        names[path + (_MESSAGE_ONEOF_DECL, i)] = _scoped(oneof_proto.name, full_name)
    for i, enum_proto in enumerate(msg_proto.enum_type):
        names[path + (_MESSAGE_ENUM_TYPE, i)] = _scoped(enum_proto.name, full_name)
    for i, nested_proto in enumerate(msg_proto.nested_type):
        _index_message(
            nested_proto,
            path + (_MESSAGE_NESTED_TYPE, i),
            _scoped(nested_proto.name, full_name),
            names,
        )
