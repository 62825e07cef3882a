"""
Benchmark: trie decoding vs whole-table scan decoding

Compresses synthetic datasets and decodes every result twice: once with
the trie decoder used by codec.decompress, once with a baseline that
compares the pending bits against every code in the table after each bit.

Outputs (in --outdir):
  - metrics.csv     (raw row per run per decoder)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --size_kb 64 --generators zipf128,english_like
  python experiments.py --outdir results --no_exp1 --exp2_min_kb 1 --exp2_max_kb 256
"""

from __future__ import annotations

import argparse
import bisect
import csv
import random
import statistics
import time
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

import codec
from bitpack import DecodeError, DecodeTrie
from codetable import serialize_code_table
from huffman import build_huffman_tree, freq_table, generate_huffman_codes, sorted_frequencies

DECODERS = ("trie", "scan")


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def scan_decode(compressed: bytes, code_map: Dict[int, str]) -> bytes:
    """
    Baseline decoder: grows a bit string and looks it up among all codes
    after every bit
    """
    if not compressed:
        return b""
    pad_bits = compressed[0]
    payload = compressed[codec.HEADER_SIZE:]
    total_bits = len(payload) * 8 - pad_bits
    codes = list(code_map.items())
    longest = max((len(c) for c in code_map.values()), default=0)

    decoded = bytearray()
    pending = ""
    bit_index = 0
    for byte in payload:
        for i in range(7, -1, -1):
            if bit_index >= total_bits:
                break
            pending += "1" if (byte >> i) & 1 else "0"
            bit_index += 1
            for symbol, code in codes:
                if code == pending:
                    decoded.append(symbol)
                    pending = ""
                    break
            if len(pending) > longest:
                raise DecodeError(f"no code matches {pending!r}")

    if pending:
        raise DecodeError(f"stream ends with {len(pending)} unmatched bits")
    return bytes(decoded)


def trie_decode(compressed: bytes, code_map: Dict[int, str]) -> bytes:
    return codec.decompress(compressed, code_map)


DECODER_FUNCS: Dict[str, Callable[[bytes, Dict[int, str]], bytes]] = {
    "trie": trie_decode,
    "scan": scan_decode,
}


# Synthetic dataset generators

def _sample_cdf(rng: random.Random, weights: List[float], size: int) -> List[int]:
    total = sum(weights)
    cdf = []
    acc = 0.0
    for w in weights:
        acc += w / total
        cdf.append(acc)
    last = len(cdf) - 1
    return [min(bisect.bisect_left(cdf, rng.random()), last) for _ in range(size)]

def gen_uniform(size: int, alphabet: int = 256, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    return bytes(rng.randrange(0, alphabet) for _ in range(size))

def gen_repetitive(size: int, dominant: int = ord('A'), dom_frac: float = 0.90, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    others = [i for i in range(256) if i != dominant]
    return bytes(dominant if rng.random() < dom_frac else rng.choice(others) for _ in range(size))

def gen_zipf_like(size: int, alphabet: int = 128, s: float = 1.2, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    weights = [1.0 / ((i + 1) ** s) for i in range(alphabet)]
    return bytes(_sample_cdf(rng, weights, size))

ENGLISH_CHARS = " etaoinshrdlcumwfgypbvkjxqETAOINSHRDLCUMWFGYPBVKJXQ\n"

def _english_weight(ch: str) -> float:
    if ch == ' ':
        return 13.0
    if ch == '\n':
        return 1.5
    if ch.lower() in "etaoinshrdlu":
        return 6.0
    if ch.lower() in "cmfwgypbvk":
        return 2.5
    return 1.2

def gen_english_like(size: int, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    weights = [_english_weight(ch) for ch in ENGLISH_CHARS]
    return bytes(ord(ENGLISH_CHARS[i]) for i in _sample_cdf(rng, weights, size))

def gen_single_symbol(size: int, seed: int = 0) -> bytes:
    return b"A" * size

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], bytes]] = {
    "uniform256": lambda size, seed: gen_uniform(size, alphabet=256, seed=seed),
    "uniform16": lambda size, seed: gen_uniform(size, alphabet=16, seed=seed),
    "zipf128": lambda size, seed: gen_zipf_like(size, alphabet=128, s=1.2, seed=seed),
    "zipf256": lambda size, seed: gen_zipf_like(size, alphabet=256, s=1.5, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
    "single": lambda size, seed: gen_single_symbol(size, seed=seed),
}

def generate_dataset(name: str, size_bytes: int, seed: int) -> bytes:
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        raise ValueError(f"unknown generator {name!r}; choose from {', '.join(sorted(GENERATOR_REGISTRY))}")
    return fn(size_bytes, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    file_size_bytes: int
    run_id: int
    decoder: str  # "trie" or "scan"
    unique_symbols: int
    max_code_len: int
    avg_code_len: float  # bits per input byte

    build_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    compressed_bytes: int
    table_bytes: int
    pad_bits: int
    compression_ratio: float

    correctness_ok: int  # 1 or 0


def run_one(data: bytes, decoder: str) -> MetricRow:
    decode_fn = DECODER_FUNCS.get(decoder)
    if decode_fn is None:
        raise ValueError(f"decoder must be one of {DECODERS}")

    ft = freq_table(data)

    t0 = now_ns()
    root = build_huffman_tree(sorted_frequencies(ft))
    code_map = generate_huffman_codes(root)
    t1 = now_ns()

    compressed = codec.compress_with_table(data, code_map)
    t2 = now_ns()

    decoded = decode_fn(compressed, code_map)
    t3 = now_ns()

    build_ms = ns_to_ms(t1 - t0)
    encode_ms = ns_to_ms(t2 - t1)
    decode_ms = ns_to_ms(t3 - t2)
    total_bits = sum(ft[s] * len(code) for s, code in code_map.items())

    return MetricRow(
        exp_name="",
        dataset_name="",
        file_size_bytes=len(data),
        run_id=0,
        decoder=decoder,
        unique_symbols=len(ft),
        max_code_len=max((len(c) for c in code_map.values()), default=0),
        avg_code_len=total_bits / max(1, len(data)),
        build_ms=build_ms,
        encode_ms=encode_ms,
        decode_ms=decode_ms,
        total_ms=build_ms + encode_ms + decode_ms,
        compressed_bytes=len(compressed),
        table_bytes=len(serialize_code_table(code_map).encode("utf-8")),
        pad_bits=compressed[0] if compressed else 0,
        compression_ratio=len(compressed) / max(1, len(data)),
        correctness_ok=1 if decoded == data else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    names = [f.name for f in fields(MetricRow)]
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=names)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in names})


SUMMARY_METRICS = ("compression_ratio", "avg_code_len", "build_ms", "encode_ms", "decode_ms", "total_ms")


def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)


def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, file_size_bytes, decoder and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int, str], List[MetricRow]] = {}
    for r in rows:
        key = (r.exp_name, r.dataset_name, r.file_size_bytes, r.decoder)
        key_to.setdefault(key, []).append(r)

    summary_fields = ["exp_name", "dataset_name", "file_size_bytes", "decoder", "n_runs"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for key, items in sorted(key_to.items()):
            exp_name, dataset_name, size_b, decoder = key
            row = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "file_size_bytes": size_b,
                "decoder": decoder,
                "n_runs": len(items),
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            }
            for m in SUMMARY_METRICS:
                row[f"{m}_mean"], row[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            w.writerow(row)


# Plotting

def _line_chart(x, series: Dict[str, List[float]], xlabel: str, ylabel: str, title: str,
                out_file: Path, xticklabels: List[str] = None) -> None:
    plt.figure()
    for label, y in series.items():
        plt.plot(x, y, marker="o", label=label)
    if xticklabels is not None:
        plt.xticks(x, xticklabels, rotation=20, ha="right")
    if xlabel:
        plt.xlabel(xlabel)
    plt.ylabel(ylabel)
    plt.title(title)
    if len(series) > 1:
        plt.legend()
    plt.tight_layout()
    plt.savefig(out_file, dpi=200)
    plt.close()


def plot_experiment_1(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))
    x = list(range(len(datasets)))

    def mean_for(dataset: str, decoder: str, field: str) -> float:
        vals = [getattr(r, field) for r in exp_rows if r.dataset_name == dataset and r.decoder == decoder]
        return statistics.mean(vals) if vals else float("nan")

    _line_chart(x, {"huffman": [mean_for(d, "trie", "compression_ratio") for d in datasets]},
                "", "Compressed Bytes / Original Bytes",
                "Experiment 1: Compression Ratio by Distribution",
                outdir / "exp1_compression_ratio.png", datasets)

    _line_chart(x, {"huffman": [mean_for(d, "trie", "avg_code_len") for d in datasets]},
                "", "Average Code Length (bits/byte)",
                "Experiment 1: Average Code Length by Distribution",
                outdir / "exp1_avg_code_len.png", datasets)

    _line_chart(x, {dec: [mean_for(d, dec, "decode_ms") for d in datasets] for dec in DECODERS},
                "", "Decode Time (ms)",
                "Experiment 1: Decode Time by Distribution",
                outdir / "exp1_decode_time.png", datasets)


def plot_experiment_2(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_size_scaling"]
    if not exp_rows:
        return

    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.file_size_bytes for r in dist_rows))

        def mean_size(size: int, decoder: str, field: str) -> float:
            vals = [getattr(r, field) for r in dist_rows if r.file_size_bytes == size and r.decoder == decoder]
            return statistics.mean(vals) if vals else float("nan")

        _line_chart(sizes, {dec: [mean_size(s, dec, "decode_ms") for s in sizes] for dec in DECODERS},
                    "File Size (bytes)", "Decode Time (ms)",
                    f"Experiment 2: Decode Time vs Size ({dist})",
                    outdir / f"exp2_decode_time_{dist}.png")

        _line_chart(sizes, {"encode": [mean_size(s, "trie", "encode_ms") for s in sizes]},
                    "File Size (bytes)", "Encode Time (ms)",
                    f"Experiment 2: Encode Time vs Size ({dist})",
                    outdir / f"exp2_encode_time_{dist}.png")


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]


def run_experiments(args: argparse.Namespace) -> List[MetricRow]:
    rows: List[MetricRow] = []

    def record(exp_name: str, dataset_name: str, data: bytes, run_id: int) -> None:
        for decoder in DECODERS:
            row = run_one(data, decoder)
            row.exp_name = exp_name
            row.dataset_name = dataset_name
            row.run_id = run_id
            rows.append(row)

    # Experiment 1: distributions (fixed size)
    if not args.no_exp1:
        fixed_size = max(1, args.size_kb) * 1024
        for gen_name in parse_csv_list(args.generators):
            for run_id in range(1, args.runs + 1):
                data = generate_dataset(gen_name, fixed_size, args.seed + run_id)
                record("exp1_distribution", gen_name, data, run_id)

    # Experiment 2: size scaling (powers of 2)
    if not args.no_exp2:
        sizes: List[int] = []
        s = max(1, args.exp2_min_kb) * 1024
        while s <= max(1, args.exp2_max_kb) * 1024:
            sizes.append(s)
            s *= 2

        for gen_name in parse_csv_list(args.exp2_generators):
            for size_b in sizes:
                for run_id in range(1, args.runs + 1):
                    data = generate_dataset(gen_name, size_b, args.seed + 10_000 + size_b + run_id)
                    record("exp2_size_scaling", gen_name, data, run_id)

    return rows


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=3, help="Repetitions per configuration")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")

    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (distribution)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (size scaling)")

    ap.add_argument("--size_kb", type=int, default=64, help="Experiment 1 fixed file size in KB")
    ap.add_argument("--generators", type=str, default="uniform256,zipf128,repetitive90,english_like,single",
                    help="Comma-separated dataset generator names for experiment 1")

    ap.add_argument("--exp2_min_kb", type=int, default=4, help="Experiment 2 min size in KB (power-of-two growth)")
    ap.add_argument("--exp2_max_kb", type=int, default=256, help="Experiment 2 max size in KB")
    ap.add_argument("--exp2_generators", type=str, default="uniform256,english_like",
                    help="Comma-separated dataset generator names for experiment 2")

    args = ap.parse_args()

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    rows = run_experiments(args)

    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    plot_experiment_1(rows, outdir)
    plot_experiment_2(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
