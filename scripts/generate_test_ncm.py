#!/usr/bin/env python3
"""
Generate synthetic .ncm containers for manual testing.
Uses FFmpeg for a real audio payload when available, random bytes otherwise.
"""
import io
import os
import subprocess
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from PIL import Image

from ncmdump import build_container


def check_ffmpeg():
    """Check if ffmpeg is available."""
    try:
        result = subprocess.run(["ffmpeg", "-version"], capture_output=True)
    except FileNotFoundError:
        return False
    return result.returncode == 0


def generate_audio(fmt, duration_sec=3):
    """Render a sine tone in the given container format, or fall back to noise."""
    if not check_ffmpeg():
        print(f"  ffmpeg not found, using random bytes for {fmt}")
        return os.urandom(64 * 1024)
    cmd = [
        "ffmpeg", "-loglevel", "error",
        "-f", "lavfi", "-i", f"sine=frequency=440:duration={duration_sec}",
        "-f", fmt, "-",
    ]
    result = subprocess.run(cmd, capture_output=True)
    if result.returncode != 0:
        print(f"ffmpeg failed for {fmt}: {result.stderr.decode(errors='replace')}", file=sys.stderr)
        sys.exit(1)
    return result.stdout


def generate_cover(width=64, height=64):
    buf = io.BytesIO()
    Image.new("RGB", (width, height), (30, 120, 200)).save(buf, format="JPEG")
    return buf.getvalue()


def main():
    out_dir = REPO_ROOT / "samples"
    out_dir.mkdir(exist_ok=True)
    samples = [
        (out_dir / "sample_mp3.ncm", "mp3", {"format": "mp3", "musicName": "Sample MP3"}),
        (out_dir / "sample_flac.ncm", "flac", {"format": "flac", "musicName": "Sample FLAC"}),
        (out_dir / "sample_nometa.ncm", "mp3", None),
    ]

    print("Generating sample NCM containers...")
    for output_path, fmt, metadata in samples:
        if output_path.exists():
            print(f"Skipping {output_path.name} (already exists)")
            continue
        audio = generate_audio(fmt)
        container = build_container(audio, os.urandom(32), metadata, cover=generate_cover())
        output_path.write_bytes(container)
        print(f"  ✓ {output_path.name}: {len(container) / 1024:.1f} KB")

    return 0


if __name__ == "__main__":
    sys.exit(main())
