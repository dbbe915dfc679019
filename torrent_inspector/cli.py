import argparse
import logging
import sys
from typing import Optional, Sequence

from torrent_inspector import bencode
from torrent_inspector.elements import Dictionary
from torrent_inspector.metainfo import Metainfo, MetainfoStructureError
from torrent_inspector.source import REQUEST_TIMEOUT, SourceError, read_source

logger = logging.getLogger(__name__)


def depth_limit(text: str) -> int:
    depth = int(text)
    if not 1 <= depth <= bencode.MAX_DEPTH_LIMIT:
        raise argparse.ArgumentTypeError(f"must be between 1 and {bencode.MAX_DEPTH_LIMIT}, not {depth}")
    return depth


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="torrent-inspector",
        description="Show the content and info hash of a torrent file",
    )
    parser.add_argument("input", help="Torrent file path or http(s) url")
    parser.add_argument("-t", "--tree", action="store_true", help="Print the decoded tree")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug messages")
    parser.add_argument(
        "--max-depth",
        type=depth_limit,
        default=bencode.MAX_DEPTH,
        help="Deepest list/dictionary nesting to accept (default: %(default)s)",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=REQUEST_TIMEOUT,
        help="Seconds to wait when downloading a url (default: %(default)s)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig()
    logging.getLogger("torrent_inspector").setLevel(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        data = read_source(args.input, timeout=args.timeout)
        root = bencode.loads(data, max_depth=args.max_depth)
        if args.tree:
            print(root, end="")
        if not isinstance(root, Dictionary):
            print("Expected dict but got something else", file=sys.stderr)
            return 1
        metainfo = Metainfo.from_element(root, data)
    except (SourceError, bencode.BencodeDecodingError, MetainfoStructureError) as e:
        logger.debug("Failed on %s", args.input, exc_info=True)
        print("Error: {}".format(e), file=sys.stderr)
        return 1

    print("\n".join(metainfo.summary_lines()))
    print("info starts at {} and ends at {}".format(metainfo.info_start, metainfo.info_end))
    return 0


if __name__ == "__main__":
    sys.exit(main())
