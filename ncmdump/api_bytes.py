"""In-memory helpers: decode a container held in a bytes buffer."""

from .main import ncmdump


def decode(data: bytes):
    return ncmdump.decode(data)


def dump_bytes(data: bytes, source_name: str | None = None, *, chunk_size: int | None = None):
    return ncmdump.decode(data, source_name, chunk_size=chunk_size)


def read_metadata(data: bytes):
    return ncmdump.read_metadata(data)


def build_container(
    audio: bytes,
    key: bytes,
    metadata: dict | None = None,
    *,
    cover: bytes = b"",
    checksum: int = 0,
):
    return ncmdump.build_container(audio, key, metadata, cover=cover, checksum=checksum)


def mime_for_format(fmt: str) -> str:
    return ncmdump.mime_for_format(fmt)


def output_name(source_name: str | None, fmt: str) -> str:
    return ncmdump.output_name(source_name, fmt)


__all__ = [
    "build_container",
    "decode",
    "dump_bytes",
    "mime_for_format",
    "output_name",
    "read_metadata",
]
