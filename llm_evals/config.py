from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional
import os

from dotenv import load_dotenv
from openai import OpenAI

from llm_evals.errors import ConfigurationError

ROOT_DIR = Path(__file__).resolve().parents[1]
ENV_PATH = ROOT_DIR / ".env"

API_KEY_ENV = "OPENAI_API_KEY"
BASE_MODEL = "gpt-4o"

# Constants for rate limiting
REQUESTS_PER_MINUTE = 200
MAX_CONCURRENCY = 3
BATCH_DELAY_SECONDS = 30
DEFAULT_RETRIES = 3


# Read the API key from the environment (or .env) before any call is made
def load_api_key(env_path: Optional[str] = None) -> str:

    load_dotenv(env_path or ENV_PATH)

    api_key = (os.getenv(API_KEY_ENV) or "").strip()
    if not api_key:
        raise ConfigurationError(
            f"{API_KEY_ENV} is not set. Add it to your environment or to {env_path or ENV_PATH}."
        )
    return api_key


def create_client(api_key: str) -> OpenAI:
    return OpenAI(api_key=api_key)


@dataclass
class EvalConfig:
    """Everything a run needs, built once at startup and passed around."""

    client: Any
    base_model: str = BASE_MODEL
    data_dir: str = "./data"
    train_path: str = "./data/winemag_train_dataset.csv"
    validation_path: str = "./data/winemag_validation_dataset.csv"
    requests_per_minute: int = REQUESTS_PER_MINUTE
    max_concurrency: int = MAX_CONCURRENCY
    batch_delay_seconds: float = BATCH_DELAY_SECONDS
    retries: int = DEFAULT_RETRIES

    @property
    def batch_size(self) -> int:
        # a quarter of the per-minute budget per batch
        return max(1, self.requests_per_minute // 4)

    def dataset_path(self, dataset: str) -> str:
        if dataset == "train":
            return self.train_path
        if dataset == "validation":
            return self.validation_path
        raise ConfigurationError(f"Unknown dataset '{dataset}'. Use 'train' or 'validation'.")

    @classmethod
    def from_data_dir(cls, client: Any, data_dir: str = "./data", **kwargs) -> "EvalConfig":
        data = Path(data_dir)
        return cls(
            client=client,
            data_dir=str(data),
            train_path=str(data / "winemag_train_dataset.csv"),
            validation_path=str(data / "winemag_validation_dataset.csv"),
            **kwargs,
        )
