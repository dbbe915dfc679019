import hashlib
import logging
from datetime import datetime, timezone
from typing import Optional

from torrent_inspector import bencode
from torrent_inspector.cursor import SeekableCursor
from torrent_inspector.elements import ByteString, Dictionary, Element, Integer, List

logger = logging.getLogger(__name__)

SHA1_DIGEST_LEN = 20
NOT_AVAILABLE = "- na -"


class MetainfoStructureError(ValueError):
    pass


def grouper(arr: bytes, group_size: int) -> list[bytes]:
    return [arr[i : i + group_size] for i in range(0, len(arr), group_size)]


def _info_dictionary(root: Element) -> Optional[Dictionary]:
    if not isinstance(root, Dictionary):
        return None
    info = root.get(b"info")
    if not isinstance(info, Dictionary):
        return None
    return info


def calculate_info_hash(root: Element, data: bytes) -> Optional[bytes]:
    """
    Hashes the raw bytes of the ``info`` dictionary

    Args:
        - root (Element): Decoded torrent, expected to be a Dictionary
        - data (bytes): The exact buffer ``root`` was decoded from

    Returns:
        - Optional[bytes]: 20 byte SHA-1 digest, None if there is no ``info`` dictionary
    """
    info = _info_dictionary(root)
    if info is None:
        return None

    cursor = SeekableCursor(data)
    try:
        raw_info = cursor.read_exact(info.start, info.end - info.start)
    except EOFError as e:
        logger.warning("Could not read info dictionary at [%d, %d): %s", info.start, info.end, e)
        return None
    return hashlib.sha1(raw_info).digest()


def calculate_info_hash_as_string(root: Element, data: bytes) -> Optional[str]:
    """Hex form of :func:`calculate_info_hash`"""
    digest = calculate_info_hash(root, data)
    if digest is None:
        return None
    return digest.hex()


def _field(key: str | bytes, root: Element) -> Optional[Element]:
    if not isinstance(root, Dictionary):
        return None
    return root.get(key)


def extract_bytes(key: str | bytes, root: Element) -> Optional[bytes]:
    value = _field(key, root)
    if isinstance(value, ByteString):
        return value.value
    return None


def extract_string(key: str | bytes, root: Element) -> Optional[str]:
    value = _field(key, root)
    if isinstance(value, ByteString):
        return value.text()
    return None


def extract_int(key: str | bytes, root: Element) -> Optional[int]:
    value = _field(key, root)
    if isinstance(value, Integer):
        return value.value
    return None


def _announce_tiers(root: Dictionary) -> list[list[str]]:
    tiers: list[list[str]] = []
    announce_list = root.get(b"announce-list")
    if isinstance(announce_list, List):
        for tier in announce_list:
            # some writers put bare urls in announce-list instead of tiers
            items = tier if isinstance(tier, List) else [tier]
            urls = [
                url for item in items if isinstance(item, ByteString) and (url := item.text())
            ]
            if urls:
                tiers.append(urls)
    if not tiers:
        announce = extract_string(b"announce", root)
        if announce:
            tiers.append([announce])
    return tiers


def _total_size(info: Dictionary) -> int:
    length = extract_int(b"length", info)
    if length is not None:
        return length
    files = info.get(b"files")
    if not isinstance(files, List):
        return 0
    return sum(extract_int(b"length", file) or 0 for file in files)


class Metainfo:
    def __init__(self, root: Dictionary, info: Dictionary, info_hash: bytes):
        """
        Summary of a decoded torrent file

        Args:
            - root (Dictionary): Decoded torrent
            - info (Dictionary): The ``info`` dictionary of ``root``
            - info_hash (bytes): SHA-1 of the raw ``info`` bytes
        """
        self.announce: Optional[str] = extract_string(b"announce", root)
        self.announce_list: list[list[str]] = _announce_tiers(root)
        self.comment: Optional[str] = extract_string(b"comment", root)
        self.creation_date: Optional[int] = extract_int(b"creation date", root)
        self.created_by: Optional[str] = extract_string(b"created by", root)

        self.name: Optional[str] = extract_string(b"name", info)
        self.piece_length: Optional[int] = extract_int(b"piece length", info)
        self.size: int = _total_size(info)

        pieces = extract_bytes(b"pieces", info) or b""
        if len(pieces) % SHA1_DIGEST_LEN != 0:
            raise MetainfoStructureError('Invalid length of "pieces" string')
        self.pieces: list[bytes] = grouper(pieces, SHA1_DIGEST_LEN)

        self.info_start: int = info.start
        self.info_end: int = info.end
        self.info_hash: bytes = info_hash

    def __repr__(self) -> str:
        return f"<Metainfo {self.name!r} {self.infohash}>"

    @property
    def infohash(self) -> str:
        return self.info_hash.hex()

    @property
    def trackers(self) -> list[str]:
        trackers: list[str] = []
        for tier in self.announce_list:
            # add trackers only if they are not already present
            for tracker in tier:
                if tracker not in trackers:
                    trackers.append(tracker)
        return trackers

    @classmethod
    def from_element(cls, root: Element, data: bytes) -> "Metainfo":
        if not isinstance(root, Dictionary):
            raise MetainfoStructureError(f"Expected a dictionary at the root, not {type(root).__name__}")
        if b"info" not in root:
            raise MetainfoStructureError('Missing "info" dictionary')
        info = _info_dictionary(root)
        if info is None:
            raise MetainfoStructureError(f'"info" is a {type(root[b"info"]).__name__}, not a dictionary')

        info_hash = calculate_info_hash(root, data)
        if info_hash is None:
            raise MetainfoStructureError("Info dictionary lies outside of the supplied buffer")
        return cls(root, info, info_hash)

    @classmethod
    def from_bytes(cls, data: bytes, max_depth: int = bencode.MAX_DEPTH) -> "Metainfo":
        return cls.from_element(bencode.loads(data, max_depth=max_depth), data)

    def summary_lines(self) -> list[str]:
        date = NOT_AVAILABLE
        if self.creation_date is not None:
            try:
                date = datetime.fromtimestamp(self.creation_date, tz=timezone.utc).isoformat()
            except (OverflowError, OSError, ValueError):
                date = str(self.creation_date)
        return [
            f"{'name':>17}: {self.name or NOT_AVAILABLE}",
            f"{'comment':>17}: {self.comment or NOT_AVAILABLE}",
            f"{'date':>17}: {date}",
            f"{'created by':>17}: {self.created_by or NOT_AVAILABLE}",
            f"{'announce':>17}: {self.announce or NOT_AVAILABLE}",
            f"{'trackers':>17}: {len(self.trackers)}",
            f"{'size':>17}: {self.size} bytes",
            f"{'pieces':>17}: {len(self.pieces)} x {self.piece_length or 0} bytes",
            f"{'info hash':>17}: {self.infohash}",
        ]
