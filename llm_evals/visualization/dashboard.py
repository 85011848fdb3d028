import csv
import sys
from pathlib import Path
from typing import Dict, List, Optional

import matplotlib.pyplot as plt

from llm_evals.evaluation.analysis import SUMMARY_HEADER


# load the analysis summary written by analyze_predictions
def load_analysis_summary(path: str) -> List[Dict[str, float]]:
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Analysis summary not found: {path}")

    rows = []
    with open(path, "r", encoding="utf-8", newline="") as f:
        for row in csv.DictReader(f):
            rows.append({
                "model": row[SUMMARY_HEADER["model"]],
                "accuracy": float(row[SUMMARY_HEADER["accuracy"]]),
                "total_predictions": int(row[SUMMARY_HEADER["total_predictions"]]),
                "correct_predictions": int(row[SUMMARY_HEADER["correct_predictions"]]),
            })
    return rows


# plot dashboard
def plot_accuracy_comparison(summary_path: str, out_path: Optional[str] = None):
    rows = load_analysis_summary(summary_path)

    models = [r["model"] for r in rows]
    accuracies = [r["accuracy"] for r in rows]

    fig, ax = plt.subplots(figsize=(8, 5))
    bars = ax.bar(models, accuracies, color=["#1f77b4", "#ff7f0e", "#2ca02c", "#d62728"][:len(models)])
    ax.set_ylim(0, 1)
    ax.set_ylabel("Accuracy")
    ax.set_title("Model Accuracy Comparison")
    ax.grid(axis="y")

    for bar, r in zip(bars, rows):
        ax.text(
            bar.get_x() + bar.get_width() / 2,
            bar.get_height() + 0.02,
            f"{r['accuracy']:.0%} ({r['correct_predictions']}/{r['total_predictions']})",
            ha="center",
        )

    plt.tight_layout()

    if out_path:
        Path(out_path).parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(out_path)
        plt.close(fig)
    else:
        plt.show()

    return fig


# Main entry

def main():
    if len(sys.argv) < 2:
        print("Usage: python -m llm_evals.visualization.dashboard <analysis_results.csv> [out.png]")
        sys.exit(1)

    summary_path = sys.argv[1]
    out_path = sys.argv[2] if len(sys.argv) > 2 else None

    print(f"\nLoading dashboard for {summary_path}\n")
    plot_accuracy_comparison(summary_path, out_path)


if __name__ == "__main__":
    main()
