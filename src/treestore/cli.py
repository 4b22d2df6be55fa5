"""Admin command line: inspect and maintain a store from a shell."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Optional, Sequence

from treestore.config import StoreSettings, get_settings
from treestore.errors import TreeStoreError
from treestore.factory import open_store
from treestore.logging_setup import setup_logging
from treestore.models import file_to_dict, folder_to_dict
from treestore.store import TreeStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="treestore",
        description="Manage the folder/file metadata store.",
    )
    parser.add_argument("--log-level", default=None, help="Override TREESTORE_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("folders", help="List folders under a parent (root by default)")
    p.add_argument("--parent", default=None)

    p = sub.add_parser("files", help="List files in a folder")
    p.add_argument("folder_id")

    p = sub.add_parser("mkdir", help="Create a folder")
    p.add_argument("name")
    p.add_argument("--parent", default=None)

    p = sub.add_parser("rmdir", help="Delete a folder and everything below it")
    p.add_argument("folder_id")

    p = sub.add_parser("rm", help="Delete a file record")
    p.add_argument("file_id")

    p = sub.add_parser("reset", help="Replace the store with an empty one")
    p.add_argument("--yes", action="store_true", help="Confirm the reset")

    return parser


def run(store: TreeStore, args: argparse.Namespace) -> Any:
    if args.command == "folders":
        return [folder_to_dict(f) for f in store.list_folders(args.parent)]
    if args.command == "files":
        return [file_to_dict(f) for f in store.list_files(args.folder_id)]
    if args.command == "mkdir":
        return folder_to_dict(store.create_folder(args.name, args.parent))
    if args.command == "rmdir":
        result = store.delete_folder(args.folder_id)
        return {"folderIds": result.folder_ids, "files": [file_to_dict(f) for f in result.files]}
    if args.command == "rm":
        result = store.delete_file(args.file_id)
        return {"files": [file_to_dict(f) for f in result.files]}
    if args.command == "reset":
        store.reset()
        return {"reset": True}
    raise ValueError(f"Unknown command: {args.command}")


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    settings: Optional[StoreSettings] = None,
) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "reset" and not args.yes:
        print("Refusing to reset without --yes", file=sys.stderr)
        return 2

    settings = settings or get_settings()
    setup_logging(args.log_level or settings.log_level)

    store = open_store(settings)
    try:
        output = run(store, args)
    except TreeStoreError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        store.backend.close()

    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0
