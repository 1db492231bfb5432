"""Minimal reader for the ABI word encoding used by Data Streams reports.

Every report field is a static 32-byte word. The only dynamic value we touch is
the ``reportBlob`` inside the signed envelope, located through its offset word.
"""

from __future__ import annotations

WORD_SIZE = 32

# Position of the reportBlob offset word in
# (bytes32[3] reportContext, bytes reportBlob, bytes32[] rawRs, bytes32[] rawSs, bytes32 rawVs)
REPORT_BLOB_OFFSET_WORD = 3
ENVELOPE_HEAD_WORDS = 7


class DecodeError(ValueError):
    """Raised when a report blob cannot be decoded."""


def hex_to_bytes(value: str | bytes) -> bytes:
    """Convert ``0x``-prefixed (or bare) hex into bytes."""

    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str):
        raise DecodeError(f"Expected hex string, got {type(value).__name__}")
    text = value[2:] if value[:2].lower() == "0x" else value
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise DecodeError(f"Invalid hex data: {exc}") from exc


def read_word(data: bytes, index: int) -> bytes:
    """Return the ``index``-th 32-byte word of ``data``."""

    start = index * WORD_SIZE
    end = start + WORD_SIZE
    if index < 0 or end > len(data):
        raise DecodeError(f"Word {index} out of range for {len(data)}-byte payload")
    return data[start:end]


def decode_uint(word: bytes, bits: int) -> int:
    value = int.from_bytes(word, "big", signed=False)
    if value >= 1 << bits:
        raise DecodeError(f"Value does not fit in uint{bits}")
    return value


def decode_int(word: bytes, bits: int) -> int:
    value = int.from_bytes(word, "big", signed=True)
    bound = 1 << (bits - 1)
    if not -bound <= value < bound:
        raise DecodeError(f"Value does not fit in int{bits}")
    return value


def decode_bytes32(word: bytes) -> str:
    return "0x" + word.hex()


def decode_word(word: bytes, abi_type: str) -> int | str:
    """Decode a single static word according to its ABI type name."""

    if abi_type == "bytes32":
        return decode_bytes32(word)
    if abi_type.startswith("uint"):
        return decode_uint(word, _bit_width(abi_type, "uint"))
    if abi_type.startswith("int"):
        return decode_int(word, _bit_width(abi_type, "int"))
    raise DecodeError(f"Unsupported ABI type: {abi_type}")


def read_dynamic_bytes(data: bytes, offset: int) -> bytes:
    """Read a length-prefixed ``bytes`` value starting at byte ``offset``."""

    if offset % WORD_SIZE or offset + WORD_SIZE > len(data):
        raise DecodeError(f"Invalid dynamic offset {offset}")
    length = decode_uint(data[offset : offset + WORD_SIZE], 64)
    start = offset + WORD_SIZE
    if start + length > len(data):
        raise DecodeError(f"Dynamic bytes of length {length} overrun {len(data)}-byte payload")
    return data[start : start + length]


def extract_report_blob(full_report: bytes) -> bytes:
    """Pull ``reportBlob`` out of the signed full-report envelope."""

    if len(full_report) < ENVELOPE_HEAD_WORDS * WORD_SIZE:
        raise DecodeError(f"Full report too short ({len(full_report)} bytes)")
    offset = decode_uint(read_word(full_report, REPORT_BLOB_OFFSET_WORD), 64)
    return read_dynamic_bytes(full_report, offset)


def _bit_width(abi_type: str, prefix: str) -> int:
    suffix = abi_type[len(prefix):]
    try:
        bits = int(suffix) if suffix else 256
    except ValueError as exc:
        raise DecodeError(f"Unsupported ABI type: {abi_type}") from exc
    if bits <= 0 or bits > 256 or bits % 8:
        raise DecodeError(f"Unsupported ABI type: {abi_type}")
    return bits


__all__ = [
    "DecodeError",
    "WORD_SIZE",
    "decode_word",
    "extract_report_blob",
    "hex_to_bytes",
    "read_dynamic_bytes",
    "read_word",
]
