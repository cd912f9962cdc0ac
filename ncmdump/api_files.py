"""File-oriented wrappers (single file and batch decoding)."""

import sys
import warnings

from .main import ncmdump


def _with_friendly_interrupt(fn, *args, **kwargs):
    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", UserWarning)
            result = fn(*args, **kwargs)
        for item in caught:
            msg = str(item.message).strip()
            if msg:
                print(f"⚠ {msg}", file=sys.stderr)
        return result
    except KeyboardInterrupt:
        raise KeyboardInterrupt("Exiting...") from None


def dump_file(path: str, output_dir: str | None = None, *, save_cover: bool = False):
    return _with_friendly_interrupt(ncmdump.dump_file, path, output_dir, save_cover=save_cover)


def dump_files(
    files,
    output_dir: str | None = None,
    *,
    save_cover: bool = False,
    silent: bool = False,
    max_workers: int | None = None,
):
    return _with_friendly_interrupt(
        ncmdump.dump_files,
        files,
        output_dir,
        save_cover=save_cover,
        silent=silent,
        max_workers=max_workers,
    )


__all__ = ["dump_file", "dump_files"]
