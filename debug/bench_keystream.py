#!/usr/bin/env python3
"""Quick keystream XOR benchmark: byte loop vs numpy path"""
import os
import time


PAYLOAD = os.urandom(4 * 1024 * 1024)


def bench(fast_min, payload):
    from ncmdump.main import ncmdump

    box = ncmdump.build_key_box(b"benchmark-key-0123456789")
    previous = ncmdump.FAST_XOR_MIN
    ncmdump.FAST_XOR_MIN = fast_min
    try:
        start = time.perf_counter()
        result = ncmdump.decrypt_audio(payload, box)
        elapsed = time.perf_counter() - start
    finally:
        ncmdump.FAST_XOR_MIN = previous
    return elapsed, result


def main():
    size_mib = len(PAYLOAD) / (1024 * 1024)
    print(f"Benchmarking keystream XOR over {size_mib:.0f} MiB...\n")

    np_time, np_result = bench(1, PAYLOAD)
    print(f"numpy:     {np_time:.3f}s ({size_mib / np_time:.1f} MiB/s)")

    sample = PAYLOAD[:256 * 1024]
    loop_time, loop_result = bench(len(sample) + 1, sample)
    print(f"byte loop: {loop_time:.3f}s for 256 KiB ({0.25 / loop_time:.2f} MiB/s)")

    if np_result[:len(sample)] != loop_result:
        print("\n✗ outputs differ")
        return 1
    print("\n✅ outputs match")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
