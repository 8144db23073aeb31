from __future__ import annotations

from pathlib import Path

import pandas as pd

from lpmedoids.analysis.summarize import main as summarize_main
from lpmedoids.experiments.run import main as run_main


def test_experiment_run_and_summary(tmp_path: Path) -> None:
    raw = tmp_path / "raw"
    out = tmp_path / "summary"

    run_main(
        [
            "--output", str(raw),
            "--sizes", "8",
            "--k", "2", "9",
            "--kind", "blobs",
            "--repetitions", "2",
        ]
    )

    files = list(raw.glob("*.parquet"))
    assert [f.name for f in files] == ["blobs_n8_k2.parquet"]
    df = pd.read_parquet(files[0])
    assert set(df["algorithm"]) == {"lp_rounding", "kmeans_snapped"}
    lp_rows = df[df["algorithm"] == "lp_rounding"]
    assert len(lp_rows) == 2
    assert (lp_rows["ratio"] >= 1.0 - 1e-6).all()

    summarize_main(["--raw", str(raw), "--output", str(out)])

    assert (out / "summary.csv").exists()
    assert (out / "table_algorithm_comparison.tex").exists()
    assert (out / "ratio_by_size.png").exists()
