from __future__ import annotations

import os
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional

from google.protobuf import descriptor_pb2

from protodoc.registry import DescriptorLoadError, SchemaRegistry


def find_proto_files(root: str) -> List[str]:
    """Recursively find .proto files under root, as sorted root-relative paths."""
    return sorted(p.relative_to(root).as_posix() for p in Path(root).rglob("*.proto"))


def compile_descriptor_set(proto_root_dir: str, package_prefix: str = "") -> descriptor_pb2.FileDescriptorSet:
    """Compile every .proto under proto_root_dir into a FileDescriptorSet.

    With a package prefix, the root directory is mounted at that prefix, so
    imports written as "<prefix>/path/x.proto" resolve to
    "<proto_root_dir>/path/x.proto".
    """
    rel_paths = find_proto_files(proto_root_dir)
    if not rel_paths:
        raise DescriptorLoadError(f"No .proto files found under {proto_root_dir}")

    root = os.path.abspath(proto_root_dir)
    prefix = package_prefix.strip("/")
    inc_args = ["-I", f"{prefix}={root}" if prefix else root]
    # protoc maps disk paths back to import paths through the -I entry.
    inputs = [os.path.join(root, p) for p in rel_paths]

    with tempfile.TemporaryDirectory() as td:
        desc_path = os.path.join(td, "descriptor_set.pb")
        cmd = [
            "protoc",
            "--include_imports",
            "--include_source_info",
            f"--descriptor_set_out={desc_path}",
        ] + inc_args + inputs
        try:
            subprocess.run(cmd, check=True, capture_output=True)
        except FileNotFoundError as e:
            raise DescriptorLoadError(
                "'protoc' not found. Please install Protocol Buffers compiler and ensure it is in PATH."
            ) from e
        except subprocess.CalledProcessError as e:
            raise DescriptorLoadError(f"protoc failed: {e.stderr.decode('utf-8', errors='ignore')}") from e

        fds = descriptor_pb2.FileDescriptorSet()
        fds.ParseFromString(Path(desc_path).read_bytes())

    return fds


def load_registry(
    proto_root_dir: str,
    package_prefix: str = "",
    descriptor_set: Optional[str] = None,
) -> SchemaRegistry:
    """Build a SchemaRegistry from a precompiled descriptor set or from sources."""
    if descriptor_set:
        return SchemaRegistry.from_file(descriptor_set)
    return SchemaRegistry(compile_descriptor_set(proto_root_dir, package_prefix))
