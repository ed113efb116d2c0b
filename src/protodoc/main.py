from __future__ import annotations

import argparse
import logging
import os
import sys
from importlib import metadata
from typing import List, Optional

from protodoc.generator.html_generator import generate_overview, generate_package_docs
from protodoc.models import Formatter
from protodoc.parser.descriptor_loader import load_registry
from protodoc.registry import ProtodocError

DEFAULT_ROOT_MESSAGE = "cloudprober.ProberConfig"


def _version() -> str:
    try:
        return metadata.version("protodoc")
    except metadata.PackageNotFoundError:
        return "unknown"


def run(
    out_dir: str,
    proto_root_dir: str = ".",
    out_format: str = "yaml",
    package_prefix: str = "",
    root_message: str = DEFAULT_ROOT_MESSAGE,
    home_url: str = "",
    descriptor_set: Optional[str] = None,
) -> List[str]:
    """Main pipeline: load schemas, document the root message, then its packages."""
    os.makedirs(out_dir, exist_ok=True)

    # 1. Load descriptors
    registry = load_registry(proto_root_dir, package_prefix, descriptor_set)

    # 2. Overview of the root message
    f = (
        Formatter()
        .with_yaml(out_format == "yaml")
        .with_rel_path("..")
        .with_home_url(home_url)
        .with_namespace(root_message.split(".", 1)[0])
    )
    overview, next_message_names = generate_overview(registry, root_message, f, out_dir)
    print(f"  Generated overview: {overview}")

    # 3. Package level documentation
    generated = [overview]
    for path in generate_package_docs(registry, next_message_names, f, out_dir):
        print(f"  Generated package doc: {path}")
        generated.append(path)

    print(f"Documentation generated in {out_dir}")
    return generated


def main():
    parser = argparse.ArgumentParser(
        description="Generate HTML configuration documentation from protobuf schemas",
    )
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    parser.add_argument(
        "--format",
        choices=["yaml", "textpb"],
        default="yaml",
        help="Field syntax used in the generated docs",
    )
    parser.add_argument("--out-dir", default="proto_docs", help="Output directory for the documentation")
    parser.add_argument("--proto-root-dir", default=".", help="Root directory for the proto files")
    parser.add_argument("--package-prefix", default="", help="Package prefix to resolve import paths")
    parser.add_argument(
        "--descriptor-set",
        help="Precompiled FileDescriptorSet (built with --include_source_info) to use instead of running protoc",
    )
    parser.add_argument(
        "--root-message",
        default=DEFAULT_ROOT_MESSAGE,
        help="Fully-qualified name of the message documented in the overview",
    )
    parser.add_argument("--home-url", default="", help="Home URL for the documentation")

    args = parser.parse_args()

    if args.version:
        print(_version())
        return

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        run(
            args.out_dir,
            proto_root_dir=args.proto_root_dir,
            out_format=args.format,
            package_prefix=args.package_prefix,
            root_message=args.root_message,
            home_url=args.home_url,
            descriptor_set=args.descriptor_set,
        )
    except (ProtodocError, OSError) as e:
        print(f"FATAL: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
