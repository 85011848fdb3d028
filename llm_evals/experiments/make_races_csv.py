import sys

from llm_evals.models.race_prompts import RACES_DATASET
from llm_evals.utils.io import convert_to_csv


# Usage: python -m llm_evals.experiments.make_races_csv [out.csv]
# Writes the race/__expected file read by compare_prompts
def main():
    out_path = sys.argv[1].strip() if len(sys.argv) > 1 else "data/races.csv"

    convert_to_csv(RACES_DATASET, "race", "likely_winner", out_path)
    print(f"Wrote {len(RACES_DATASET)} races to {out_path}")


if __name__ == "__main__":
    main()
