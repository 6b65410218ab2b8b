#!/usr/bin/env python3
"""
GraphBuilder Micro-benchmark Harness.

Benchmarks `GraphBuilder.build()` under synthetic workloads using
deterministic component and call generation.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from datetime import datetime, timezone
import json
import math
from pathlib import Path
import random
import statistics
import sys
import time
import tracemalloc
from typing import Any, Optional

# Ensure repository root is importable when executing this file directly.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from graphweave.analysis.reference import HubSizing, ReferenceMarking
from graphweave.assembly.builder import GraphBuilder
from graphweave.core.config import BuilderConfig
from graphweave.core.schema import Category, Link, Node
from graphweave.export.dgml import serialize
from graphweave.export.fingerprint import graph_fingerprint
from graphweave.rules.interface import RuleSet


LAYERS = ("api", "service", "domain", "data", "infra")


@dataclass(frozen=True)
class Component:
    name: str
    layer: str
    package: str


@dataclass(frozen=True)
class Call:
    caller: str
    callee: str


@dataclass(frozen=True)
class ScenarioConfig:
    """Benchmark scenario configuration."""

    component_count: int
    calls_per_component: int
    warmup_runs: int
    measured_runs: int
    seed: int


def generate_workload(
    component_count: int,
    calls_per_component: int,
    seed: int,
) -> tuple[list[Component], list[Call]]:
    """
    Generate deterministic components and calls.

    Calls prefer callees in the same or a lower layer and repeat on
    purpose, so the merge path sees link collisions.
    """
    rng = random.Random(seed)
    package_count = max(1, int(math.sqrt(component_count)))

    components = [
        Component(
            name=f"c{index:05d}",
            layer=LAYERS[index % len(LAYERS)],
            package=f"pkg{index % package_count:03d}",
        )
        for index in range(component_count)
    ]

    calls: list[Call] = []
    for caller in components:
        for _ in range(calls_per_component):
            callee = components[rng.randrange(len(components))]
            if callee is caller:
                continue
            calls.append(Call(caller.name, callee.name))

    return components, calls


def build_rules() -> RuleSet:
    """Node, category and link rules plus package containment."""
    rules = RuleSet()

    @rules.node(Component)
    def component_node(c: Component) -> list[Node]:
        return [
            Node(id=c.name, label=c.name, category=c.layer),
            Node(id=c.package, label=c.package, category="Package"),
        ]

    @rules.category(Component)
    def layer_category(c: Component) -> Category:
        return Category(id=c.layer, label=c.layer.title())

    @rules.link(Component)
    def containment_link(c: Component) -> Link:
        return Link(source=c.package, target=c.name, category="Contains")

    @rules.link(Call)
    def call_link(call: Call) -> Link:
        return Link(source=call.caller, target=call.callee, category="Calls")

    return rules


def percentile(values: list[float], percentile_rank: float) -> float:
    """Compute percentile with linear interpolation."""
    if not values:
        return 0.0
    ordered = sorted(values)
    if len(ordered) == 1:
        return ordered[0]

    position = (len(ordered) - 1) * percentile_rank
    lower = math.floor(position)
    upper = math.ceil(position)
    if lower == upper:
        return ordered[lower]

    fraction = position - lower
    return ordered[lower] + (ordered[upper] - ordered[lower]) * fraction


def run_scenario(config: ScenarioConfig) -> dict[str, Any]:
    """Run one benchmark scenario and return structured metrics."""
    components, calls = generate_workload(
        component_count=config.component_count,
        calls_per_component=config.calls_per_component,
        seed=config.seed,
    )
    builder = GraphBuilder(
        build_rules(),
        analyses=[HubSizing(), ReferenceMarking()],
        config=BuilderConfig(verbose=False),
    )

    for _ in range(config.warmup_runs):
        builder.build(components, calls)

    latencies_ms: list[float] = []
    peak_memory_mib: list[float] = []
    fingerprints: set[str] = set()
    graph = None
    report = None

    for _ in range(config.measured_runs):
        tracemalloc.start()
        started = time.perf_counter()
        graph, report = builder.build_with_report(components, calls)
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        _, peak_bytes = tracemalloc.get_traced_memory()
        tracemalloc.stop()

        latencies_ms.append(elapsed_ms)
        peak_memory_mib.append(peak_bytes / (1024.0 * 1024.0))
        fingerprints.add(graph_fingerprint(graph))

    serialize_started = time.perf_counter()
    document = serialize(graph)
    serialize_ms = (time.perf_counter() - serialize_started) * 1000.0

    return {
        "scenario": {
            "components": config.component_count,
            "calls_per_component": config.calls_per_component,
            "seed": config.seed,
            "warmup_runs": config.warmup_runs,
            "measured_runs": config.measured_runs,
        },
        "input": {
            "components": len(components),
            "calls": len(calls),
        },
        "graph": graph.summary(),
        "latency_ms": {
            "min": min(latencies_ms),
            "max": max(latencies_ms),
            "mean": statistics.mean(latencies_ms),
            "median": statistics.median(latencies_ms),
            "p95": percentile(latencies_ms, 0.95),
        },
        "peak_memory_mib": {
            "min": min(peak_memory_mib),
            "max": max(peak_memory_mib),
            "mean": statistics.mean(peak_memory_mib),
            "median": statistics.median(peak_memory_mib),
            "p95": percentile(peak_memory_mib, 0.95),
        },
        "report": {
            "objects_processed": report.objects_processed,
            "fragments_produced": report.fragments_produced,
            "collisions": len(report.collisions),
        },
        "serialize": {
            "ms": serialize_ms,
            "bytes": len(document),
        },
        "deterministic": len(fingerprints) == 1,
    }


def print_human_summary(result: dict[str, Any]) -> None:
    """Print compact human-readable summary for CLI runs."""
    scenario = result["scenario"]
    graph = result["graph"]
    latency = result["latency_ms"]
    memory = result["peak_memory_mib"]
    report = result["report"]

    print(
        f"[Scenario] components={scenario['components']}, "
        f"calls/component={scenario['calls_per_component']}, runs={scenario['measured_runs']}"
    )
    print(f"  Graph: nodes={graph['nodes']}, links={graph['links']}, categories={graph['categories']}")
    print(
        "  Latency(ms): "
        f"mean={latency['mean']:.2f}, median={latency['median']:.2f}, p95={latency['p95']:.2f}, "
        f"min={latency['min']:.2f}, max={latency['max']:.2f}"
    )
    print(
        "  Peak Memory(MiB): "
        f"mean={memory['mean']:.2f}, median={memory['median']:.2f}, p95={memory['p95']:.2f}, "
        f"min={memory['min']:.2f}, max={memory['max']:.2f}"
    )
    print(
        f"  Report: objects={report['objects_processed']}, "
        f"fragments={report['fragments_produced']}, collisions={report['collisions']}"
    )
    print(f"  Deterministic: {result['deterministic']}")


def evaluate_threshold_warnings(
    result: dict[str, Any],
    warn_mean_latency_ms: Optional[float],
    warn_p95_latency_ms: Optional[float],
) -> list[str]:
    """Evaluate optional warning thresholds for one scenario."""
    warnings: list[str] = []
    scenario = result["scenario"]
    latency = result["latency_ms"]

    if not result["deterministic"]:
        warnings.append(f"components={scenario['components']}: repeated builds disagree")

    if warn_mean_latency_ms is not None and latency["mean"] > warn_mean_latency_ms:
        warnings.append(
            f"components={scenario['components']}: mean latency {latency['mean']:.2f} ms "
            f"exceeds {warn_mean_latency_ms:.2f} ms"
        )

    if warn_p95_latency_ms is not None and latency["p95"] > warn_p95_latency_ms:
        warnings.append(
            f"components={scenario['components']}: p95 latency {latency['p95']:.2f} ms "
            f"exceeds {warn_p95_latency_ms:.2f} ms"
        )

    return warnings


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark GraphBuilder assembly and analysis.")
    parser.add_argument(
        "--component-counts",
        nargs="+",
        type=int,
        default=[1000, 10000],
        help="Component counts to benchmark.",
    )
    parser.add_argument(
        "--calls-per-component",
        type=int,
        default=3,
        help="Outgoing calls generated per component.",
    )
    parser.add_argument(
        "--warmup-runs",
        type=int,
        default=1,
        help="Warmup iterations per scenario.",
    )
    parser.add_argument(
        "--runs",
        type=int,
        default=3,
        help="Measured iterations per scenario.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=7,
        help="Random seed for deterministic fixture generation.",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="",
        help="Optional path to write JSON results.",
    )
    parser.add_argument(
        "--warn-mean-latency-ms",
        type=float,
        default=None,
        help="Optional warning threshold for mean latency per scenario.",
    )
    parser.add_argument(
        "--warn-p95-latency-ms",
        type=float,
        default=None,
        help="Optional warning threshold for p95 latency per scenario.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit non-zero when any warning is raised.",
    )
    args = parser.parse_args()

    started_at = datetime.now(timezone.utc).isoformat()
    results: list[dict[str, Any]] = []
    warnings: list[str] = []

    for component_count in args.component_counts:
        scenario = ScenarioConfig(
            component_count=component_count,
            calls_per_component=args.calls_per_component,
            warmup_runs=args.warmup_runs,
            measured_runs=args.runs,
            seed=args.seed,
        )
        result = run_scenario(scenario)
        results.append(result)
        print_human_summary(result)
        warnings.extend(
            evaluate_threshold_warnings(
                result=result,
                warn_mean_latency_ms=args.warn_mean_latency_ms,
                warn_p95_latency_ms=args.warn_p95_latency_ms,
            )
        )

    if warnings:
        print("[Warnings]")
        for warning in warnings:
            print(f"  - {warning}")

    payload = {
        "benchmark": "build_microbench",
        "started_at": started_at,
        "python": {
            "version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        },
        "thresholds": {
            "warn_mean_latency_ms": args.warn_mean_latency_ms,
            "warn_p95_latency_ms": args.warn_p95_latency_ms,
            "strict": args.strict,
        },
        "results": results,
        "warnings": warnings,
    }

    if args.output:
        with open(args.output, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2)
        print(f"[Output] wrote JSON results to {args.output}")
    else:
        print(json.dumps(payload, indent=2))

    if args.strict and warnings:
        raise SystemExit(2)


if __name__ == "__main__":
    main()
