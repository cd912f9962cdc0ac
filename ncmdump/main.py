# NCMDUMP DECODING ENGINE ->

import os as _os_module
import re as _re_module
from dataclasses import dataclass as _dataclass, field as _field


class NcmError(ValueError):
    """Base class for every container decoding failure."""


class InvalidHeader(NcmError):
    """The buffer does not start with the CTENFDAM magic."""


class OutOfBounds(NcmError):
    """A length-prefixed field claims more bytes than remain."""


class CipherError(NcmError):
    """AES-ECB decryption failed."""


class PaddingError(CipherError):
    """The last decrypted block carries invalid PKCS#7 padding."""


class LengthError(CipherError):
    """The ciphertext is empty or not a multiple of the 16-byte block size."""


class KeyRecoveryError(NcmError):
    """The per-file key block could not be decrypted."""


class EmptyKeyError(NcmError):
    """The recovered per-file key is zero bytes long."""


class MetadataDecodeError(NcmError):
    """The metadata block could not be decoded; never fatal for audio."""


class OutputWriteError(NcmError):
    """The decoded output could not be written; no output file is left behind."""


@_dataclass(frozen=True)
class ParsedContainer:
    key_box: bytes
    metadata: dict
    metadata_error: "str | None"
    checksum: int
    cover: bytes
    audio_offset: int


@_dataclass(frozen=True)
class DumpResult:
    audio: bytes
    format: str
    metadata: dict = _field(default_factory=dict)
    filename: str = ""
    mime: str = "application/octet-stream"
    cover: bytes = b""
    cover_format: "str | None" = None
    checksum: int = 0


class ncmdump:
    import base64
    import concurrent.futures
    import glob
    import io
    import json
    import pathlib
    import struct
    import sys
    import tempfile
    import threading
    import time
    import typing
    import warnings
    import os
    import numpy as np
    from PIL import Image
    from cryptography.hazmat.primitives import padding
    from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

    @staticmethod
    def _env_int(name: str) -> "ncmdump.typing.Optional[int]":
        value = _os_module.getenv(name)
        if not value:
            return None
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            return None
        if parsed <= 0:
            return None
        return parsed

    ENGINE_VERSION = "1.2.0"
    MAGIC = b"CTENFDAM"
    HEADER_RESERVED = 2
    TRAILER_RESERVED = 5
    CORE_KEY = bytes.fromhex("687A4852416D736F356B496E62617857")
    META_KEY = bytes.fromhex("2331346C6A6B5F215C5D2630553C2728")
    KEY_MASK = 0x64
    META_MASK = 0x63
    KEY_TAG = b"neteasecloudmusic"
    META_PREFIX = b"163 key(Don't modify):"
    META_TAG = "music:"
    AES_BLOCK = 16
    DEFAULT_FORMAT = "mp3"
    DEFAULT_SOURCE_NAME = "output.ncm"
    SOURCE_SUFFIX = _re_module.compile(r"\.ncm$", _re_module.IGNORECASE)
    MIME_TYPES: typing.ClassVar[dict[str, str]] = {
        "mp3": "audio/mpeg",
        "flac": "audio/flac",
        "m4a": "audio/mp4",
        "aac": "audio/aac",
        "wav": "audio/wav",
        "ogg": "audio/ogg",
    }
    COVER_SUFFIXES: typing.ClassVar[dict[str, str]] = {"JPEG": "jpg", "MPO": "jpg", "TIFF": "tif"}
    FAST_XOR_MIN = 4 * 1024
    CHUNK_SIZE = _env_int("NCMDUMP_CHUNK_SIZE") or 0x8000
    MAX_INPUT_BYTES = _env_int("NCMDUMP_MAX_INPUT_BYTES") or 2 * 1024 * 1024 * 1024
    _CPU_COUNT = max(1, os.cpu_count() or 1)
    MAX_WORKERS = _env_int("NCMDUMP_WORKERS") or _CPU_COUNT
    PROGRESS_BAR_WIDTH = 30
    _MASK_TABLES: typing.ClassVar[dict[int, bytes]] = {
        mask: bytes(i ^ mask for i in range(256)) for mask in (KEY_MASK, META_MASK)
    }

    class _ProgressReporter:
        """Two-line progress display: overall batch bar and current file bar."""

        def __init__(self, total_files: int, stream=None, min_interval: float = 0.1):
            self.total_files = max(total_files, 1)
            self.stream = stream or ncmdump.sys.stderr
            self._min_interval = max(0.0, float(min_interval))
            self._is_tty = bool(getattr(self.stream, "isatty", lambda: False)())
            self._printed = False
            self._last_render = 0.0
            self._fractions: dict[int, float] = {}
            self._lock = ncmdump.threading.Lock()
            try:
                import colorama
                self._green = colorama.Fore.GREEN
                self._red = colorama.Fore.RED
                self._reset = colorama.Fore.RESET
            except ImportError:
                self._green = self._red = self._reset = ""

        def _bar(self, fraction: float) -> str:
            width = ncmdump.PROGRESS_BAR_WIDTH
            filled = int(max(0.0, min(1.0, fraction)) * width)
            body = "#" * filled + "-" * (width - filled)
            if filled == width:
                return f"[{self._green}{body}{self._reset}]"
            return f"[{body}]"

        def _write(self, line1: str, line2: str, force: bool = False) -> None:
            now = ncmdump.time.monotonic()
            if not force and self._printed and (now - self._last_render) < self._min_interval:
                return
            if self._is_tty:
                if self._printed:
                    self.stream.write("\x1b[1A\r")
                self.stream.write("\r\x1b[2K" + line1 + "\n\r\x1b[2K" + line2)
            elif self._printed and not force:
                return
            else:
                self.stream.write(line1 + "\n" + line2 + "\n")
            self.stream.flush()
            self._printed = True
            self._last_render = now

        def _overall(self) -> str:
            overall = sum(self._fractions.values()) / self.total_files
            done = sum(1 for frac in self._fractions.values() if frac >= 1.0)
            return f"Overall {self._bar(overall)} {overall * 100:3.0f}% {done}/{self.total_files} files"

        def update(self, file_index: int, fraction: float, phase: str, path) -> None:
            fraction = max(0.0, min(1.0, float(fraction)))
            with self._lock:
                self._fractions[file_index] = fraction
                line1 = self._overall()
                label = f" [{path.name}]" if path else ""
                line2 = f"File    {self._bar(fraction)} {fraction * 100:3.0f}% phase: {phase}{label}"
                self._write(line1, line2)

        def finalize_file(self, file_index: int, path, *, size_hint=None, error: "str | None" = None) -> None:
            with self._lock:
                self._fractions[file_index] = 1.0
                line1 = self._overall()
                label = f" [{path.name}]" if path else ""
                if error:
                    line2 = f"File    {self._bar(0.0)}   0% {self._red}failed: {error}{self._reset}{label}"
                else:
                    hint = ""
                    if size_hint:
                        src, dst = size_hint
                        hint = f" ({ncmdump._human_readable_size(src)} -> {ncmdump._human_readable_size(dst)})"
                    line2 = f"File    {self._bar(1.0)} 100% phase: done{hint}{label}"
                self._write(line1, line2, force=True)
                if self._is_tty:
                    self.stream.write("\n")
                    self.stream.flush()
                    self._printed = False

    class _ByteCursor:
        """Sequential reader with little-endian integers and bounds-checked slices."""

        def __init__(self, data: bytes, offset: int = 0):
            self._view = memoryview(data)
            self.offset = offset

        @property
        def remaining(self) -> int:
            return len(self._view) - self.offset

        def _require(self, count: int, label: str) -> None:
            if count < 0 or count > self.remaining:
                raise OutOfBounds(
                    f"{label} needs {count} bytes at offset {self.offset}, only {self.remaining} remain"
                )

        def read_u32le(self, label: str = "length") -> int:
            self._require(4, label)
            value = ncmdump.struct.unpack_from("<I", self._view, self.offset)[0]
            self.offset += 4
            return value

        def read_bytes(self, count: int, label: str = "field") -> bytes:
            self._require(count, label)
            chunk = bytes(self._view[self.offset:self.offset + count])
            self.offset += count
            return chunk

        def peek(self, count: int) -> bytes:
            return bytes(self._view[self.offset:self.offset + count])

        def skip(self, count: int, label: str = "reserved") -> None:
            self._require(count, label)
            self.offset += count

        def read_block(self, label: str) -> bytes:
            length = self.read_u32le(f"{label} length")
            return self.read_bytes(length, label)

    @staticmethod
    def _human_readable_size(num_bytes: int) -> str:
        value = float(num_bytes)
        for unit in ("B", "KiB", "MiB", "GiB"):
            if value < 1024.0:
                return f"{value:.2f} {unit}"
            value /= 1024.0
        return f"{value:.2f} TiB"

    @staticmethod
    def _normalize_path(path_like) -> "ncmdump.pathlib.Path":
        path = ncmdump.pathlib.Path(str(path_like)).expanduser()
        try:
            return path.resolve(strict=False)
        except OSError:
            return path

    @staticmethod
    def _ensure_existing_file(path: "ncmdump.pathlib.Path") -> None:
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Input file not found: {path}")

    @staticmethod
    def _ensure_size_limit(path: "ncmdump.pathlib.Path", max_bytes: "int | None" = None) -> None:
        limit = max_bytes or ncmdump.MAX_INPUT_BYTES
        size = path.stat().st_size
        if size > limit:
            raise ValueError(
                f"{path.name} is {ncmdump._human_readable_size(size)}, "
                f"exceeding the {ncmdump._human_readable_size(limit)} limit"
            )

    @staticmethod
    def _xor_mask(data: bytes, mask: int) -> bytes:
        table = ncmdump._MASK_TABLES.get(mask)
        if table is None:
            table = bytes(i ^ mask for i in range(256))
        return bytes(data).translate(table)

    @staticmethod
    def _ecb_cipher(key: bytes):
        if len(key) != ncmdump.AES_BLOCK:
            raise LengthError(f"AES-128 key must be 16 bytes, got {len(key)}")
        return ncmdump.Cipher(ncmdump.algorithms.AES(bytes(key)), ncmdump.modes.ECB())

    @staticmethod
    def decrypt_ecb(ciphertext: bytes, key: bytes) -> bytes:
        """AES-128-ECB decrypt and strip PKCS#7 padding."""
        if len(ciphertext) % ncmdump.AES_BLOCK:
            raise LengthError(f"Ciphertext length {len(ciphertext)} is not a multiple of 16")
        decryptor = ncmdump._ecb_cipher(key).decryptor()
        padded = decryptor.update(bytes(ciphertext)) + decryptor.finalize()
        unpadder = ncmdump.padding.PKCS7(128).unpadder()
        try:
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as exc:
            raise PaddingError("Invalid PKCS#7 padding") from exc

    @staticmethod
    def encrypt_ecb(plaintext: bytes, key: bytes) -> bytes:
        padder = ncmdump.padding.PKCS7(128).padder()
        padded = padder.update(bytes(plaintext)) + padder.finalize()
        encryptor = ncmdump._ecb_cipher(key).encryptor()
        return encryptor.update(padded) + encryptor.finalize()

    @staticmethod
    def build_key_box(key: bytes) -> bytes:
        """Derive the 256-entry keystream table from the per-file key.

        RC4-style key scheduling: every step swaps two entries, so the table
        is always a permutation of 0..255.
        """
        if not key:
            raise EmptyKeyError("Derived key is empty; cannot build the keystream table")
        box = bytearray(range(256))
        key_len = len(key)
        last = 0
        key_offset = 0
        for i in range(256):
            swap = box[i]
            c = (swap + last + key[key_offset]) & 0xff
            key_offset += 1
            if key_offset >= key_len:
                key_offset = 0
            box[i] = box[c]
            box[c] = swap
            last = c
        return bytes(box)

    @staticmethod
    def _keystream_block(key_box: bytes) -> bytes:
        # Byte n of the payload is masked with entry n % 256 of this block.
        out = bytearray(256)
        for n in range(256):
            j = (n + 1) & 0xff
            out[n] = key_box[(key_box[j] + key_box[(key_box[j] + j) & 0xff]) & 0xff]
        return bytes(out)

    @staticmethod
    def _xor_keystream_inplace(buf: bytearray, block: bytes, offset: int = 0) -> None:
        n = len(buf)
        if not n:
            return
        start = offset & 0xff
        if n >= ncmdump.FAST_XOR_MIN:
            ks = ncmdump.np.roll(ncmdump.np.frombuffer(block, dtype=ncmdump.np.uint8), -start)
            stream = ncmdump.np.tile(ks, -(-n // 256))[:n]
            arr = ncmdump.np.frombuffer(memoryview(buf), dtype=ncmdump.np.uint8)
            ncmdump.np.bitwise_xor(arr, stream, out=arr)
            return
        for i in range(n):
            buf[i] ^= block[(start + i) & 0xff]

    @staticmethod
    def iter_decrypt_audio(
            payload: bytes,
            key_box: bytes,
            chunk_size: "int | None" = None,
            *,
            offset: int = 0
    ) -> "ncmdump.typing.Iterator[bytes]":
        """Yield the decrypted payload chunk by chunk.

        ``offset`` is the absolute payload position of ``payload[0]``; the
        keystream index never depends on where chunks start.
        """
        chunk_size = ncmdump.CHUNK_SIZE if chunk_size is None else chunk_size
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        block = ncmdump._keystream_block(key_box)
        view = memoryview(payload)
        for pos in range(0, len(view), chunk_size):
            chunk = bytearray(view[pos:pos + chunk_size])
            ncmdump._xor_keystream_inplace(chunk, block, offset + pos)
            yield bytes(chunk)

    @staticmethod
    def decrypt_audio(
            payload: bytes,
            key_box: bytes,
            *,
            chunk_size: "int | None" = None,
            offset: int = 0
    ) -> bytes:
        if chunk_size is not None:
            return b"".join(ncmdump.iter_decrypt_audio(payload, key_box, chunk_size, offset=offset))
        buf = bytearray(payload)
        ncmdump._xor_keystream_inplace(buf, ncmdump._keystream_block(key_box), offset)
        return bytes(buf)

    @staticmethod
    def _recover_key(cursor: "ncmdump._ByteCursor") -> bytes:
        block = cursor.read_block("key block")
        try:
            plain = ncmdump.decrypt_ecb(ncmdump._xor_mask(block, ncmdump.KEY_MASK), ncmdump.CORE_KEY)
        except CipherError as exc:
            raise KeyRecoveryError(f"Cannot recover the file key: {exc}") from exc
        return plain[len(ncmdump.KEY_TAG):]

    @staticmethod
    def _decode_metadata_block(block: bytes) -> "dict[str, ncmdump.typing.Any]":
        if not block:
            return {}
        masked = ncmdump._xor_mask(block, ncmdump.META_MASK)
        try:
            ciphertext = ncmdump.base64.b64decode(masked[len(ncmdump.META_PREFIX):])
            plain = ncmdump.decrypt_ecb(ciphertext, ncmdump.META_KEY)
            record = ncmdump.json.loads(plain.decode("utf-8")[len(ncmdump.META_TAG):])
        except ValueError as exc:
            # binascii, cipher, unicode and json failures are all ValueErrors
            raise MetadataDecodeError(f"Cannot decode metadata: {exc}") from exc
        if not isinstance(record, dict):
            raise MetadataDecodeError(f"Metadata is a JSON {type(record).__name__}, expected an object")
        return record

    @staticmethod
    def _parse_head(
            cursor: "ncmdump._ByteCursor"
    ) -> "tuple[bytes, dict[str, ncmdump.typing.Any], ncmdump.typing.Optional[str]]":
        if cursor.peek(len(ncmdump.MAGIC)) != ncmdump.MAGIC:
            raise InvalidHeader("Invalid NCM header (expected CTENFDAM)")
        cursor.skip(len(ncmdump.MAGIC), "magic")
        cursor.skip(ncmdump.HEADER_RESERVED, "reserved header")
        key_box = ncmdump.build_key_box(ncmdump._recover_key(cursor))
        meta_block = cursor.read_block("metadata block")
        try:
            return key_box, ncmdump._decode_metadata_block(meta_block), None
        except MetadataDecodeError as exc:
            return key_box, {}, str(exc)

    @staticmethod
    def parse_container(data: bytes) -> ParsedContainer:
        """Validate the header, recover the keystream table and locate the audio."""
        cursor = ncmdump._ByteCursor(data)
        key_box, metadata, metadata_error = ncmdump._parse_head(cursor)
        # CRC32 is read for completeness only; it is not verified.
        checksum = cursor.read_u32le("checksum")
        cursor.skip(ncmdump.TRAILER_RESERVED, "reserved trailer")
        cover = cursor.read_block("image block")
        return ParsedContainer(
            key_box=key_box,
            metadata=metadata,
            metadata_error=metadata_error,
            checksum=checksum,
            cover=cover,
            audio_offset=cursor.offset,
        )

    @staticmethod
    def read_metadata(data: bytes) -> "dict[str, ncmdump.typing.Any]":
        """Decode the metadata record only; raises MetadataDecodeError on failure."""
        cursor = ncmdump._ByteCursor(data)
        _, metadata, metadata_error = ncmdump._parse_head(cursor)
        if metadata_error:
            raise MetadataDecodeError(metadata_error)
        return metadata

    @staticmethod
    def resolve_format(metadata: "dict[str, ncmdump.typing.Any]") -> str:
        value = metadata.get("format") if isinstance(metadata, dict) else None
        if isinstance(value, str) and value.strip():
            return value.strip().lower()
        return ncmdump.DEFAULT_FORMAT

    @staticmethod
    def mime_for_format(fmt: str) -> str:
        return ncmdump.MIME_TYPES.get((fmt or "").lower(), "application/octet-stream")

    @staticmethod
    def _source_base(source_name: "str | None") -> str:
        name = ncmdump.pathlib.PurePath(source_name or ncmdump.DEFAULT_SOURCE_NAME).name
        return ncmdump.SOURCE_SUFFIX.sub("", name)

    @staticmethod
    def output_name(source_name: "str | None", fmt: str) -> str:
        return f"{ncmdump._source_base(source_name)}.{fmt}"

    @staticmethod
    def detect_cover_format(cover: bytes) -> "str | None":
        if not cover:
            return None
        try:
            with ncmdump.Image.open(ncmdump.io.BytesIO(cover)) as image:
                fmt = image.format
        except (OSError, ValueError, ncmdump.Image.DecompressionBombError):
            # oversized or broken covers are left unsniffed
            return None
        if not fmt:
            return None
        return ncmdump.COVER_SUFFIXES.get(fmt, fmt.lower())

    @staticmethod
    def _warn_on_metadata(container: ParsedContainer, label: str) -> None:
        if container.metadata_error:
            ncmdump.warnings.warn(
                f"{label}: {container.metadata_error}; falling back to {ncmdump.DEFAULT_FORMAT}",
                UserWarning,
                stacklevel=3,
            )

    @staticmethod
    def decode(
            data: bytes,
            source_name: "str | None" = None,
            *,
            chunk_size: "int | None" = None
    ) -> DumpResult:
        """Decode one container held in memory."""
        container = ncmdump.parse_container(data)
        ncmdump._warn_on_metadata(container, source_name or ncmdump.DEFAULT_SOURCE_NAME)
        fmt = ncmdump.resolve_format(container.metadata)
        audio = ncmdump.decrypt_audio(
            memoryview(data)[container.audio_offset:],
            container.key_box,
            chunk_size=chunk_size,
        )
        return DumpResult(
            audio=audio,
            format=fmt,
            metadata=container.metadata,
            filename=ncmdump.output_name(source_name, fmt),
            mime=ncmdump.mime_for_format(fmt),
            cover=container.cover,
            cover_format=ncmdump.detect_cover_format(container.cover),
            checksum=container.checksum,
        )

    @staticmethod
    def _pack_block(data: bytes) -> bytes:
        return ncmdump.struct.pack("<I", len(data)) + bytes(data)

    @staticmethod
    def build_container(
            audio: bytes,
            key: bytes,
            metadata: "ncmdump.typing.Optional[dict[str, ncmdump.typing.Any]]" = None,
            *,
            cover: bytes = b"",
            checksum: int = 0
    ) -> bytes:
        """Wrap plain audio into a container that ``decode`` accepts."""
        key_box = ncmdump.build_key_box(key)
        key_block = ncmdump._xor_mask(
            ncmdump.encrypt_ecb(ncmdump.KEY_TAG + bytes(key), ncmdump.CORE_KEY),
            ncmdump.KEY_MASK,
        )
        meta_block = b""
        if metadata is not None:
            text = ncmdump.META_TAG + ncmdump.json.dumps(metadata, ensure_ascii=False, separators=(",", ":"))
            cipher = ncmdump.encrypt_ecb(text.encode("utf-8"), ncmdump.META_KEY)
            meta_block = ncmdump._xor_mask(
                ncmdump.META_PREFIX + ncmdump.base64.b64encode(cipher),
                ncmdump.META_MASK,
            )
        out = bytearray(ncmdump.MAGIC)
        out += bytes(ncmdump.HEADER_RESERVED)
        out += ncmdump._pack_block(key_block)
        out += ncmdump._pack_block(meta_block)
        out += ncmdump.struct.pack("<I", checksum & 0xFFFFFFFF)
        out += bytes(ncmdump.TRAILER_RESERVED)
        out += ncmdump._pack_block(cover)
        # The audio transform is an XOR involution, so encoding reuses it.
        out += ncmdump.decrypt_audio(audio, key_box)
        return bytes(out)

    @staticmethod
    def _atomic_write(target: "ncmdump.pathlib.Path", chunks, progress=None) -> int:
        temp_path = None
        written = 0
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = ncmdump.tempfile.mkstemp(
                dir=target.parent,
                prefix=f".{target.stem}.",
                suffix=".part",
            )
            with ncmdump.os.fdopen(fd, "wb") as handle:
                for chunk in chunks:
                    handle.write(chunk)
                    written += len(chunk)
                    if progress:
                        progress(written)
            # mkstemp creates the file with mode 0600
            ncmdump.os.chmod(temp_path, 0o644)
            ncmdump.os.replace(temp_path, target)
        except OSError as exc:
            raise OutputWriteError(f"Cannot write {target}: {exc}") from exc
        finally:
            if temp_path is not None:
                try:
                    ncmdump.os.remove(temp_path)
                except FileNotFoundError:
                    pass
        return written

    @staticmethod
    def dump_file(
            path,
            output_dir=None,
            *,
            save_cover: bool = False,
            reporter: "ncmdump._ProgressReporter" = None,
            file_index: int = 0,
            claim: "ncmdump.typing.Optional[ncmdump.typing.Callable[[ncmdump.pathlib.Path], None]]" = None
    ) -> "ncmdump.pathlib.Path":
        """Decode a container file and write the audio beside it (or into ``output_dir``).

        ``claim`` is called with each output path before anything is written;
        it may raise ``OutputWriteError`` to refuse a path already taken.
        """
        path = ncmdump._normalize_path(path)
        ncmdump._ensure_existing_file(path)
        ncmdump._ensure_size_limit(path)
        if reporter:
            reporter.update(file_index, 0.02, "read", path)
        data = path.read_bytes()
        if reporter:
            reporter.update(file_index, 0.05, "parse", path)
        container = ncmdump.parse_container(data)
        ncmdump._warn_on_metadata(container, path.name)
        fmt = ncmdump.resolve_format(container.metadata)
        target_dir = ncmdump._normalize_path(output_dir) if output_dir else path.parent
        target = target_dir / ncmdump.output_name(path.name, fmt)
        if claim:
            claim(target)

        payload = memoryview(data)[container.audio_offset:]
        total = len(payload)
        progress = None
        if reporter and total:
            def progress(done: int) -> None:
                reporter.update(file_index, 0.05 + 0.9 * (done / total), "decrypt", path)

        written = ncmdump._atomic_write(
            target,
            ncmdump.iter_decrypt_audio(payload, container.key_box, ncmdump.CHUNK_SIZE),
            progress,
        )
        if save_cover and container.cover:
            suffix = ncmdump.detect_cover_format(container.cover) or "jpg"
            cover_path = target_dir / f"{ncmdump._source_base(path.name)}.{suffix}"
            if claim:
                claim(cover_path)
            ncmdump._atomic_write(cover_path, [container.cover])
        if reporter:
            reporter.finalize_file(file_index, target, size_hint=(len(data), written))
        return target

    @staticmethod
    def _coerce_file_list(files) -> "ncmdump.typing.List[ncmdump.pathlib.Path]":
        if isinstance(files, (str, ncmdump.pathlib.Path)):
            candidates = [files]
        else:
            candidates = list(files)
        if not candidates:
            raise ValueError("No files provided")
        return [ncmdump._normalize_path(item) for item in candidates]

    @staticmethod
    def dump_files(
            files,
            output_dir=None,
            *,
            save_cover: bool = False,
            silent: bool = False,
            max_workers: "int | None" = None
    ) -> "dict[str, str]":
        """Decode many files; one failure never stops the rest.

        Returns ``{path: "SUCCESS! -> <output>"}`` or ``{path: "FAIL! <reason>"}``.
        Two inputs that would write the same output path are not both decoded:
        the first to reach it wins and the other reports a collision.
        """
        paths = ncmdump._coerce_file_list(files)
        reporter = ncmdump._ProgressReporter(len(paths)) if not silent else None
        claimed: "set[ncmdump.pathlib.Path]" = set()
        claim_lock = ncmdump.threading.Lock()

        def _claim(target: "ncmdump.pathlib.Path") -> None:
            key = ncmdump.pathlib.Path(ncmdump.os.path.abspath(target))
            with claim_lock:
                if key in claimed:
                    raise OutputWriteError(f"{target} is already written by another input in this batch")
                claimed.add(key)

        def _process(item: "tuple[int, ncmdump.pathlib.Path]") -> "tuple[str, str]":
            idx, path = item
            try:
                target = ncmdump.dump_file(
                    path,
                    output_dir,
                    save_cover=save_cover,
                    reporter=reporter,
                    file_index=idx,
                    claim=_claim,
                )
            except Exception as exc:
                if reporter:
                    reporter.finalize_file(idx, path, error=str(exc))
                return str(path), f"FAIL! {exc}"
            return str(path), f"SUCCESS! -> {target}"

        results: dict[str, str] = {}
        workers = min(len(paths), max_workers or ncmdump.MAX_WORKERS)
        items = list(enumerate(paths))
        if workers > 1:
            with ncmdump.concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
                for file_id, status in executor.map(_process, items):
                    results[file_id] = status
        else:
            for item in items:
                file_id, status = _process(item)
                results[file_id] = status
        return results

    @staticmethod
    def _expand_paths(patterns) -> "list[str]":
        targets: list[str] = []
        for raw in patterns:
            if "*" in raw or "?" in raw:
                matches = sorted(p for p in ncmdump.glob.glob(raw) if ncmdump.os.path.isfile(p))
                targets.extend(matches)
            else:
                targets.append(raw)
        return targets


def cli(argv=None) -> int:
    import argparse
    from .api_files import dump_files

    parser = argparse.ArgumentParser(prog="ncmdump", description="Recover audio from NCM containers")
    subparsers = parser.add_subparsers(dest="command", required=True)

    dump = subparsers.add_parser("dump", help="Decode one or more .ncm files")
    dump.add_argument("paths", nargs="+", help="File paths or wildcard patterns (*, ?)")
    dump.add_argument(
        "-o", "--output-dir",
        default=None,
        help="Write decoded files here instead of next to each input"
    )
    dump.add_argument("--cover", action="store_true", help="Also write the embedded cover image")
    dump.add_argument("--silent", action="store_true", help="Disable progress output")
    dump.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Maximum number of files decoded in parallel"
    )

    info = subparsers.add_parser("info", help="Print the embedded metadata as JSON")
    info.add_argument("paths", nargs="+", help="File paths or wildcard patterns (*, ?)")

    args = parser.parse_args(argv)
    targets = ncmdump._expand_paths(args.paths)
    if not targets:
        print("No files matched.", file=ncmdump.sys.stderr)
        return 2

    if args.command == "info":
        failures = 0
        for raw_path in targets:
            try:
                path = ncmdump._normalize_path(raw_path)
                ncmdump._ensure_existing_file(path)
                metadata = ncmdump.read_metadata(path.read_bytes())
            except (NcmError, OSError) as exc:
                print(f"{raw_path}: FAIL! {exc}")
                failures += 1
                continue
            print(f"{raw_path}:")
            print(ncmdump.json.dumps(metadata, ensure_ascii=False, indent=2))
        return 0 if failures == 0 else 1

    results = dump_files(
        targets,
        args.output_dir,
        save_cover=args.cover,
        silent=args.silent,
        max_workers=args.workers,
    )
    failures = 0
    for path, status in results.items():
        print(f"{path}: {status}")
        if not status.startswith("SUCCESS!"):
            failures += 1
    return 0 if failures == 0 else 1


def main(argv=None) -> int:
    return cli(argv)


__all__ = [
    "CipherError",
    "DumpResult",
    "EmptyKeyError",
    "InvalidHeader",
    "KeyRecoveryError",
    "LengthError",
    "MetadataDecodeError",
    "NcmError",
    "OutOfBounds",
    "OutputWriteError",
    "PaddingError",
    "ParsedContainer",
    "cli",
    "main",
    "ncmdump",
]


if __name__ == "__main__":
    raise SystemExit(main())
