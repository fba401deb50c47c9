"""
metacache command line interface
"""

import argparse
import json
import logging
import mimetypes
import sys
from pathlib import Path

from metacache.cache import open_metadata_cache
from metacache.config import get_settings
from metacache.errors import NotFoundError
from metacache.models import FileMetadata
from metacache.tree import build_directory_tree
from metacache.uploads import save_upload


def _print_file(value: FileMetadata):
    print(json.dumps(value.model_dump(mode="json"), indent=2))


def bootstrap(_args):
    with open_metadata_cache() as cache:
        print(f"{cache.size} files in cache")


def get(args):
    with open_metadata_cache() as cache:
        try:
            _print_file(cache.lookup(args.path))
        except NotFoundError as e:
            logging.error(str(e))
            sys.exit(1)


def upload(args):
    file = Path(args.file)
    mime_type = args.mime_type or mimetypes.guess_type(file.name)[0]
    with open_metadata_cache() as cache:
        value = save_upload(
            cache,
            file.read_bytes(),
            original_name=file.name,
            mime_type=mime_type,
            folder=args.folder,
            owner_id=args.owner,
        )
        logging.info(f"Stored {file} as {value.path}")
        _print_file(value)


def list_files(args):
    with open_metadata_cache() as cache:
        files = cache.list_by_owner(args.owner)
        if not files:
            print(f"(No files for {args.owner})")
        for value in files:
            print(f"{value.id}  {value.path}  {value.original_name}")


def delete(args):
    with open_metadata_cache() as cache:
        if not cache.deactivate(args.id):
            logging.error(f"No file with id {args.id}")
            sys.exit(1)
        logging.info(f"Marked {args.id} as deleted")


def tree(args):
    root = args.root or get_settings().uploads_dir
    try:
        node = build_directory_tree(root)
    except FileNotFoundError as e:
        logging.error(str(e))
        sys.exit(1)
    print(node.model_dump_json(indent=2, exclude_none=True))


def main():
    parser = argparse.ArgumentParser(description=__doc__, prog="python -m metacache")

    subparsers = parser.add_subparsers(dest="action", title="action", help="Action to perform:", required=True)
    p = subparsers.add_parser("bootstrap", help="Load all active records and report the cache size")
    p.set_defaults(func=bootstrap)

    p = subparsers.add_parser("get", help="Get the metadata of a stored file")
    p.add_argument("path", help="Storage path of the file, e.g. uploads/docs/1700000000000-42.pdf")
    p.set_defaults(func=get)

    p = subparsers.add_parser("upload", help="Store a file and register its metadata")
    p.add_argument("file", help="The file to upload")
    p.add_argument("-f", "--folder", help="Folder within the uploads directory, e.g. documents/contracts/2024")
    p.add_argument("-o", "--owner", help="Id of the owner to associate the file with")
    p.add_argument("-m", "--mime-type", dest="mime_type", help="Content type (default: guessed from the name)")
    p.set_defaults(func=upload)

    p = subparsers.add_parser("list", help="List the files of an owner")
    p.add_argument("owner", help="Id of the owner")
    p.set_defaults(func=list_files)

    p = subparsers.add_parser("delete", help="Mark a file record as deleted")
    p.add_argument("id", help="Id of the file record")
    p.set_defaults(func=delete)

    p = subparsers.add_parser("tree", help="Show the directory tree of the uploads directory")
    p.add_argument("root", nargs="?", help="Directory to list (default: the uploads directory)")
    p.set_defaults(func=tree)

    args = parser.parse_args()

    logging.basicConfig(format="[%(levelname)-7s:%(name)-15s] %(message)s", level=logging.INFO)
    peewee_logger = logging.getLogger("peewee")
    peewee_logger.setLevel(logging.WARNING)

    args.func(args)


if __name__ == "__main__":
    main()
