from typing import Any, List, Literal, Type
import time

from pydantic import BaseModel, Field, create_model

from llm_evals.config import BASE_MODEL, DEFAULT_RETRIES
from llm_evals.errors import MalformedResponseError, ModelRefusalError, RetriesExhaustedError
from llm_evals.models.llm_client import build_messages, parse_structured
from llm_evals.utils.io import WineRecord
from llm_evals.utils.logging import get_logger

logger = get_logger(__name__)


SOMMELIER_PROMPT = (
    "You're a sommelier expert and you know everything about wine. "
    "You answer precisely with the name of the variety/blend."
)


# Prompt for one wine review, constrained to the known varieties
def generate_prompt(record: WineRecord, varieties: List[str]) -> str:
    variety_list = ", ".join(varieties)

    return f"""
Based on this wine review, guess the grape variety:
This wine is produced by {record.winery} in the {record.province} region of {record.country}.
It was grown in {record.region_1}. It is described as: "{record.description}".
The wine has been reviewed by {record.taster_name} and received {record.points} points.
The price is {record.price}.

Here is a list of possible grape varieties to choose from: {variety_list}.

What is the likely grape variety? Answer only with the grape variety name or blend from the list.
"""


# Response schema whose only field must be one of the varieties
def build_variety_schema(varieties: List[str]) -> Type[BaseModel]:
    if not varieties:
        raise ValueError("Cannot build a response schema from an empty variety list")

    return create_model(
        "WineVarietyPrediction",
        variety=(
            Literal[tuple(varieties)],
            Field(description="The grape variety or blend from the provided list"),
        ),
    )


def get_prediction(
    client: Any,
    model: str,
    prompt: str,
    response_format: Type[BaseModel],
    timestamp: str,
    store_completions: bool = True,
    base_model: str = BASE_MODEL,
    retries: int = DEFAULT_RETRIES,
) -> str:
    """Return the predicted variety for one prompt.

    Failed calls and replies without a parsed payload are retried with
    exponential backoff (2**attempt seconds). A refusal ends the attempts
    right away.
    """
    should_store = model == base_model and store_completions
    metadata = {"purpose": "wine_classification", "timestamp": timestamp} if should_store else None
    messages = build_messages(SOMMELIER_PROMPT, prompt)

    last_error: Exception | None = None
    for attempt in range(1, retries + 1):
        try:
            message = parse_structured(
                client,
                model=model,
                messages=messages,
                response_format=response_format,
                store=should_store,
                metadata=metadata,
            )

            if getattr(message, "refusal", None):
                raise ModelRefusalError(f"Model {model} refused to classify: {message.refusal}")

            parsed = getattr(message, "parsed", None)
            if parsed is None:
                raise MalformedResponseError(f"No valid response received from {model}")

            return parsed.variety

        except ModelRefusalError:
            raise
        except Exception as e:
            last_error = e
            if attempt == retries:
                break
            delay = 2 ** attempt
            logger.info(
                "Attempt %d/%d for %s failed (%s); retrying in %ds",
                attempt, retries, model, e, delay,
            )
            time.sleep(delay)

    raise RetriesExhaustedError(
        f"All {retries} attempts failed for model {model}"
    ) from last_error
