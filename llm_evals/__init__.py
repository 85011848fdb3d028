# Top-level package for the structured outputs & model comparison evals.

# This project implements:
# - Structured vs unstructured response demos
# - Wine variety classification with two models
# - Batched, rate-limited prediction runs with retry
# - Accuracy comparison reports and dashboard
# - Prompt-variant comparison for the race judge task

# Subpackages:
#     utils/         → CSV readers/writers, logging helpers
#     models/        → LLM client, predictor, prompt templates
#     evaluation/    → Batching, pipeline, analysis, prompt comparison
#     experiments/   → Runner scripts and demos
#     visualization/ → Accuracy dashboard
