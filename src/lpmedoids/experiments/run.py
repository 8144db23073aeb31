from __future__ import annotations

import argparse
import logging
import time
import traceback
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

import numpy as np
import pandas as pd
from sklearn.cluster import KMeans
from sklearn.metrics import adjusted_rand_score
from tqdm.auto import tqdm

from lpmedoids.algorithms import (
    LPRoundingConfig,
    clustering_cost,
    lp_rounding_k_medoids_detailed,
)
from lpmedoids.distances import InstanceConfig, MedoidInstance, blob_instance, random_instance
from lpmedoids.errors import SamplingNonconvergent, SolverFailure

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

INSTANCE_KINDS = ("uniform", "blobs")


def _iter_instances(
    kind: str, sizes: Iterable[int], k_values: Iterable[int], seed: int
) -> Iterable[Tuple[str, MedoidInstance, int]]:
    """Yield (instance_id, instance, k) over the requested grid."""
    for n in sizes:
        for k in k_values:
            if k > n:
                logger.warning(f"  Skipping n={n}, k={k}: k exceeds the number of facilities")
                continue
            config = InstanceConfig(random_state=seed + n)
            if kind == "blobs":
                instance = blob_instance(n, k, config=config)
            else:
                instance = random_instance(n, n, config=config)
            yield f"{kind}/n{n}_k{k}", instance, k


def _safe_instance_name(instance_id: str) -> str:
    return instance_id.replace("/", "_").replace("\\", "_")


def _append_results(output_root: Path, instance_id: str, rows: List[Dict], label: str) -> None:
    if not rows:
        return
    written = len(rows)
    df = pd.DataFrame(rows)
    output_path = output_root / f"{_safe_instance_name(instance_id)}.parquet"
    if output_path.exists():
        existing_df = pd.read_parquet(output_path)
        df = pd.concat([existing_df, df], ignore_index=True)
    df.to_parquet(output_path, index=False)
    logger.info(f"  Saved {written} results for {label} to {output_path}")
    rows.clear()


def _ari_or_nan(instance: MedoidInstance, labels: np.ndarray) -> float:
    if instance.labels is None:
        return float("nan")
    return float(adjusted_rand_score(instance.labels, labels))


def _run_lp_rounding_suite(
    instance_id: str,
    instance: MedoidInstance,
    k: int,
    repetitions: int,
    max_trials: int,
) -> Tuple[List[Dict], int]:
    rows: List[Dict] = []
    failures = 0

    for rep in tqdm(range(repetitions), desc="Repetitions", leave=False):
        seed = rep
        config = LPRoundingConfig(random_state=seed, max_trials=max_trials)
        try:
            t0 = time.perf_counter()
            result = lp_rounding_k_medoids_detailed(instance.d, k, dC=instance.dC, config=config)
            t1 = time.perf_counter()
        except (SamplingNonconvergent, SolverFailure) as exc:
            logger.warning(f"  LP rounding failed (rep={rep}): {exc}")
            failures += 1
            continue

        rows.append(
            {
                "instance_id": instance_id,
                "algorithm": "lp_rounding",
                "n_facilities": instance.n_facilities,
                "n_clients": instance.n_clients,
                "k": k,
                "repetition": rep,
                "seed": seed,
                "cost": result.cost,
                "lp_objective": result.lp_objective,
                "ratio": result.ratio,
                "representatives": result.n_representatives,
                "trials": result.trials,
                "ari": _ari_or_nan(instance, result.labels),
                "runtime_sec": float(t1 - t0),
            }
        )

    return rows, failures


def _snap_to_facilities(instance: MedoidInstance, centroids: np.ndarray) -> List[int]:
    """Replace each centroid by its nearest facility (duplicates collapse)."""
    diff = instance.facilities[:, None, :] - centroids[None, :, :]
    nearest = np.argmin(np.sum(diff * diff, axis=-1), axis=0)
    return sorted(set(int(i) for i in nearest))


def _run_kmeans_suite(
    instance_id: str, instance: MedoidInstance, k: int, repetitions: int, lp_objective: float
) -> List[Dict]:
    rows: List[Dict] = []

    for rep in tqdm(range(repetitions), desc="KMeans reps", leave=False):
        seed = rep
        km = KMeans(n_clusters=k, n_init="auto", random_state=seed)
        t0 = time.perf_counter()
        labels_km = km.fit_predict(instance.clients)
        medoids = _snap_to_facilities(instance, km.cluster_centers_)
        cost = clustering_cost(instance.d, medoids)
        t1 = time.perf_counter()

        rows.append(
            {
                "instance_id": instance_id,
                "algorithm": "kmeans_snapped",
                "n_facilities": instance.n_facilities,
                "n_clients": instance.n_clients,
                "k": k,
                "repetition": rep,
                "seed": seed,
                "cost": cost,
                "lp_objective": lp_objective,
                "ratio": cost / lp_objective if lp_objective > 0 else float("nan"),
                "representatives": np.nan,
                "trials": np.nan,
                "ari": _ari_or_nan(instance, labels_km),
                "runtime_sec": float(t1 - t0),
            }
        )

    return rows


def run_experiments(
    output_root: Path,
    sizes: List[int],
    k_values: List[int],
    kind: str = "uniform",
    repetitions: int = 10,
    max_trials: int = 10_000,
    seed: int = 0,
    verbose: bool = False,
) -> None:
    """Run LP rounding and the k-means baseline over a grid of synthetic instances.

    Args:
        output_root: Directory to save result Parquet files
        sizes: Instance sizes (facilities = clients = n)
        k_values: Numbers of medoids to open
        kind: Instance family, "uniform" or "blobs"
        repetitions: Number of seeds per configuration
        max_trials: Sampling-phase trial budget per run
        seed: Base seed for instance generation
        verbose: If True, enable DEBUG logging
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    if kind not in INSTANCE_KINDS:
        raise ValueError(f"Unknown instance kind: {kind!r}")

    output_root.mkdir(parents=True, exist_ok=True)

    instances = list(_iter_instances(kind, sizes, k_values, seed))
    logger.info(f"Generated {len(instances)} instances to process")

    processed_count = 0
    failed_runs = 0

    for instance_id, instance, k in tqdm(instances, desc="Instances", unit="instance"):
        try:
            logger.info(f"Processing instance: {instance_id}")
            lp_rows, failures = _run_lp_rounding_suite(
                instance_id, instance, k, repetitions, max_trials
            )
            failed_runs += failures
            lp_objective = lp_rows[0]["lp_objective"] if lp_rows else float("nan")
            _append_results(output_root, instance_id, lp_rows, "lp_rounding")

            kmeans_rows = _run_kmeans_suite(instance_id, instance, k, repetitions, lp_objective)
            _append_results(output_root, instance_id, kmeans_rows, "kmeans_snapped")
            processed_count += 1
        except Exception as exc:
            logger.error(f"Error processing instance {instance_id}: {exc}")
            logger.error(traceback.format_exc())
            continue

    logger.info("=" * 60)
    logger.info("Experiment summary:")
    logger.info(f"  Processed: {processed_count} instances")
    logger.info(f"  Failed LP-rounding runs: {failed_runs}")
    logger.info(f"  Result files in: {output_root}")
    logger.info("=" * 60)


def main(argv: List[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run LP-rounding k-medoids experiments.")
    parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Directory where raw result Parquet files will be stored.",
    )
    parser.add_argument(
        "--sizes",
        type=int,
        nargs="+",
        default=[20, 40],
        help="Instance sizes (number of points).",
    )
    parser.add_argument(
        "--k",
        type=int,
        nargs="+",
        default=[2, 4],
        help="Numbers of medoids to open.",
    )
    parser.add_argument(
        "--kind",
        choices=INSTANCE_KINDS,
        default="uniform",
        help="Synthetic instance family.",
    )
    parser.add_argument(
        "--repetitions",
        type=int,
        default=10,
        help="Number of repetitions per configuration.",
    )
    parser.add_argument(
        "--max-trials",
        type=int,
        default=10_000,
        help="Maximum rejection-sampling trials per run.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Base seed for instance generation.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging.",
    )

    args = parser.parse_args(argv)
    run_experiments(
        args.output,
        sizes=args.sizes,
        k_values=args.k,
        kind=args.kind,
        repetitions=args.repetitions,
        max_trials=args.max_trials,
        seed=args.seed,
        verbose=args.verbose,
    )


if __name__ == "__main__":
    main()
