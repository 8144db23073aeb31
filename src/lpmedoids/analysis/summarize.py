from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Dict, List

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

ALGORITHM_LABELS = {
    "lp_rounding": "LP rounding",
    "kmeans_snapped": "K-Means (snapped)",
}

METRICS = ["cost", "ratio", "trials", "ari", "runtime_sec"]


def _mean_or_none(series: pd.Series) -> float | None:
    clean = series.dropna()
    return None if clean.empty else float(clean.mean())


def _format_mean_std(mean_val: float | None, std_val: float | None, precision: int = 3) -> str:
    if mean_val is None or std_val is None:
        return "N/A"
    fmt = f"{{:.{precision}f}} ± {{:.{precision}f}}"
    return fmt.format(mean_val, std_val)


def _load_raw(raw_root: Path) -> pd.DataFrame:
    parts: List[pd.DataFrame] = []
    parquet_files = sorted(raw_root.glob("*.parquet"))
    if not parquet_files:
        raise FileNotFoundError(
            f"No Parquet files found under {raw_root}. "
            f"Make sure experiments completed successfully and generated result files."
        )
    print(f"Loading {len(parquet_files)} result files from {raw_root}")
    for p in parquet_files:
        try:
            parts.append(pd.read_parquet(p))
        except Exception as e:
            print(f"Warning: Failed to load {p}: {e}")
            continue
    if not parts:
        raise FileNotFoundError(f"Could not load any Parquet files from {raw_root}")
    return pd.concat(parts, ignore_index=True)


def _aggregate(df: pd.DataFrame) -> pd.DataFrame:
    group_cols = ["instance_id", "algorithm", "n_facilities", "n_clients", "k"]

    agg = df.groupby(group_cols, dropna=False)[METRICS].agg(["mean", "std"])
    # Flatten MultiIndex columns
    agg.columns = [f"{m}_{stat}" for m, stat in agg.columns]
    agg = agg.reset_index()
    return agg


def _create_algorithm_comparison_table(summary: pd.DataFrame) -> pd.DataFrame:
    """Compare algorithms aggregated over all instances."""
    rows = []
    for alg in sorted(summary["algorithm"].unique()):
        alg_data = summary[summary["algorithm"] == alg]
        rows.append(
            {
                "Algorithm": ALGORITHM_LABELS.get(alg, alg),
                "Cost / LP": _format_mean_std(
                    _mean_or_none(alg_data["ratio_mean"]), _mean_or_none(alg_data["ratio_std"])
                ),
                "Trials": _format_mean_std(
                    _mean_or_none(alg_data["trials_mean"]),
                    _mean_or_none(alg_data["trials_std"]),
                    precision=1,
                ),
                "ARI": _format_mean_std(
                    _mean_or_none(alg_data["ari_mean"]), _mean_or_none(alg_data["ari_std"])
                ),
                "Runtime (s)": _format_mean_std(
                    _mean_or_none(alg_data["runtime_sec_mean"]),
                    _mean_or_none(alg_data["runtime_sec_std"]),
                    precision=4,
                ),
            }
        )
    return pd.DataFrame(rows)


def _create_size_table(summary: pd.DataFrame) -> pd.DataFrame:
    """Approximation ratio of LP rounding per instance size and k."""
    lp_data = summary[summary["algorithm"] == "lp_rounding"]
    if len(lp_data) == 0:
        return pd.DataFrame()

    rows = []
    for (n, k), group in lp_data.groupby(["n_facilities", "k"]):
        rows.append(
            {
                "n": int(n),
                "k": int(k),
                "Cost / LP": _format_mean_std(
                    _mean_or_none(group["ratio_mean"]), _mean_or_none(group["ratio_std"])
                ),
                "Trials": _format_mean_std(
                    _mean_or_none(group["trials_mean"]),
                    _mean_or_none(group["trials_std"]),
                    precision=1,
                ),
            }
        )
    return pd.DataFrame(rows)


def _write_table(table: pd.DataFrame, output_root: Path, name: str) -> None:
    latex = table.to_latex(index=False, escape=False, float_format=None)
    latex = latex.replace(" ± ", " $\\pm$ ")
    (output_root / f"{name}.tex").write_text(latex, encoding="utf-8")
    table.to_csv(output_root / f"{name}.csv", index=False)


def _save_table_artifacts(summary: pd.DataFrame, output_root: Path) -> None:
    output_root.mkdir(parents=True, exist_ok=True)

    summary.to_parquet(output_root / "summary.parquet", index=False)
    summary.to_csv(output_root / "summary.csv", index=False)

    _write_table(_create_algorithm_comparison_table(summary), output_root, "table_algorithm_comparison")
    _write_table(_create_size_table(summary), output_root, "table_size")

    meta: Dict = {
        "tables": ["table_algorithm_comparison", "table_size"],
        "description": "Aggregated LP-rounding k-medoids experiment results.",
    }
    (output_root / "summary.json").write_text(json.dumps(meta, indent=2), encoding="utf-8")


def _plot_and_describe(
    summary: pd.DataFrame,
    output_root: Path,
    metric: str,
    ylabel: str,
) -> None:
    """Bar plot of a metric per instance size, one bar per algorithm."""
    plot_df = (
        summary.groupby(["algorithm", "n_facilities"], dropna=False)[f"{metric}_mean"]
        .mean()
        .reset_index()
    )

    fig, ax = plt.subplots(figsize=(8, 4))
    sizes = sorted(plot_df["n_facilities"].unique())
    x = np.arange(len(sizes))
    width = 0.35

    algorithms = sorted(plot_df["algorithm"].unique())
    for i, alg in enumerate(algorithms):
        sub = plot_df[plot_df["algorithm"] == alg]
        heights = [sub[sub["n_facilities"] == n][f"{metric}_mean"].mean() for n in sizes]
        ax.bar(x + i * width, heights, width=width, label=ALGORITHM_LABELS.get(alg, alg))

    ax.set_xticks(x + width * (len(algorithms) - 1) / 2)
    ax.set_xticklabels([str(n) for n in sizes])
    ax.set_xlabel("Number of points")
    ax.set_ylabel(ylabel)
    ax.set_title(f"{ylabel} by instance size")
    ax.legend()
    fig.tight_layout()

    fname = f"{metric}_by_size"
    img_path = output_root / f"{fname}.png"
    fig.savefig(img_path, dpi=200)
    plt.close(fig)

    meta = {
        "figure": img_path.name,
        "metric": metric,
        "ylabel": ylabel,
        "group_by": ["algorithm", "n_facilities"],
    }
    (output_root / f"{fname}.json").write_text(json.dumps(meta, indent=2), encoding="utf-8")


def main(argv: List[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Aggregate LP-rounding experiment results.")
    parser.add_argument(
        "--raw",
        type=Path,
        required=True,
        help="Directory containing raw Parquet logs.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Directory for summary tables and plots.",
    )

    args = parser.parse_args(argv)

    raw_df = _load_raw(args.raw)
    summary = _aggregate(raw_df)
    _save_table_artifacts(summary, args.output)

    _plot_and_describe(summary, args.output, metric="ratio", ylabel="Cost / LP bound")
    _plot_and_describe(summary, args.output, metric="runtime_sec", ylabel="Runtime (s)")


if __name__ == "__main__":
    main()
