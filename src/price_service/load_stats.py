#!/usr/bin/env python3
"""Summarize the ``*_stats.csv`` Locust writes for a load run against the price service."""
import argparse
import csv
import os
import sys
from dataclasses import dataclass
from typing import Dict, List, Optional


REQUEST_KEYS = ["Request Count", "Requests", "# requests", "# reqs", "num_requests"]
FAILURE_KEYS = ["Failure Count", "Failures", "# failures", "# fails", "num_failures"]
AVG_KEYS = ["Average Response Time", "avg_response_time"]
P95_KEYS = ["95%", "95th percentile", "p95"]


@dataclass
class EndpointStats:
    method: str
    name: str
    requests: int = 0
    failures: int = 0
    avg_response_time: float = 0.0
    p95_response_time: float = 0.0

    @property
    def fail_ratio(self) -> float:
        return self.failures / self.requests if self.requests > 0 else 0.0


@dataclass
class LoadSummary:
    total: EndpointStats
    endpoints: List[EndpointStats]

    def outputs(self) -> Dict[str, str]:
        return {
            "fail_ratio": f"{self.total.fail_ratio:.6f}",
            "avg_response_time": f"{self.total.avg_response_time:.2f}",
            "p95_response_time": f"{self.total.p95_response_time:.2f}",
            "total_requests": str(self.total.requests),
            "total_failures": str(self.total.failures),
        }


def read_stats_csv(csv_path: str) -> List[Dict[str, str]]:
    if not os.path.exists(csv_path):
        print(f"Stats CSV not found (defaulting to zeros): {csv_path}")
        return []
    with open(csv_path, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


def safe_int(value: Optional[str]) -> int:
    if value is None:
        return 0
    try:
        return int(value)
    except ValueError:
        try:
            return int(float(value))
        except ValueError:
            return 0


def safe_float(value: Optional[str]) -> float:
    if value is None:
        return 0.0
    try:
        return float(value)
    except ValueError:
        return 0.0


def normalize_key(key: str) -> str:
    return "".join(ch for ch in key.lower() if ch.isalnum())


def get_value(row: Dict[str, str], candidates: List[str]) -> Optional[str]:
    norm_map = {normalize_key(k): v for k, v in row.items() if k is not None}
    for cand in candidates:
        v = norm_map.get(normalize_key(cand))
        if v is not None and v != "":
            return v
    return None


def row_to_stats(row: Dict[str, str]) -> EndpointStats:
    return EndpointStats(
        method=(get_value(row, ["Type", "Method"]) or "").strip(),
        name=(get_value(row, ["Name"]) or "").strip(),
        requests=safe_int(get_value(row, REQUEST_KEYS)),
        failures=safe_int(get_value(row, FAILURE_KEYS)),
        avg_response_time=safe_float(get_value(row, AVG_KEYS)),
        p95_response_time=safe_float(get_value(row, P95_KEYS)),
    )


def summarize(rows: List[Dict[str, str]]) -> LoadSummary:
    """Split rows into per-endpoint stats and the ``Aggregated`` row.

    Without an ``Aggregated`` row the totals stay zero.
    """
    total = EndpointStats(method="", name="Aggregated")
    endpoints: List[EndpointStats] = []
    for row in rows:
        if not row:
            continue
        stats = row_to_stats(row)
        if stats.name.lower() == "aggregated":
            total = stats
        else:
            endpoints.append(stats)
    return LoadSummary(total=total, endpoints=endpoints)


def write_github_output(path: str, outputs: Dict[str, str]) -> None:
    with open(path, "a", encoding="utf-8") as f:
        for k, v in outputs.items():
            f.write(f"{k}={v}\n")


def print_summary(summary: LoadSummary) -> None:
    total = summary.total
    print("Load test summary:")
    print(f"  total_requests: {total.requests}")
    print(f"  total_failures: {total.failures}")
    print(f"  fail_ratio: {total.fail_ratio:.6f}")
    print(f"  avg_response_time: {total.avg_response_time:.2f} ms")
    print(f"  p95_response_time: {total.p95_response_time:.2f} ms")
    if summary.endpoints:
        print("Endpoints:")
    for ep in summary.endpoints:
        label = f"{ep.method} {ep.name}".strip()
        print(
            f"  {label}: {ep.requests} requests, {ep.failures} failures, "
            f"avg {ep.avg_response_time:.2f} ms, p95 {ep.p95_response_time:.2f} ms"
        )


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Summarize Locust CSV stats for a price service load run"
    )
    parser.add_argument(
        "--csv-path",
        required=True,
        help="Path to *_stats.csv produced by Locust --csv",
    )
    parser.add_argument(
        "--github-output",
        required=False,
        help="Path to GITHUB_OUTPUT file to write outputs",
    )
    parser.add_argument(
        "--max-fail-ratio",
        type=float,
        default=None,
        help="Exit with status 1 when the aggregated fail ratio exceeds this value",
    )
    args = parser.parse_args(argv)

    summary = summarize(read_stats_csv(args.csv_path))

    github_output_path = args.github_output or os.environ.get("GITHUB_OUTPUT")
    if github_output_path:
        write_github_output(github_output_path, summary.outputs())

    print_summary(summary)

    if args.max_fail_ratio is not None and summary.total.fail_ratio > args.max_fail_ratio:
        print(
            f"fail_ratio {summary.total.fail_ratio:.6f} exceeds "
            f"--max-fail-ratio {args.max_fail_ratio:.6f}"
        )
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
