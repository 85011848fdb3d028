from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass
class LLMConfig:
    model: str
    max_completion_tokens: int = 512
    temperature: float | None = None  # Only used when model allows it
    seed: int | None = None


def build_messages(system_prompt: str, user_prompt: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]


# Free-form (unstructured) completion
def call_llm(
    client: Any,
    system_prompt: str,
    user_prompt: str,
    cfg: LLMConfig,
    json_mode: bool = False
) -> str:

    # Build request payload
    request: Dict[str, Any] = {
        "model": cfg.model,
        "messages": build_messages(system_prompt, user_prompt),
        "max_completion_tokens": cfg.max_completion_tokens,
    }

    # Temperature allowed only for certain models
    if cfg.temperature is not None:
        request["temperature"] = cfg.temperature

    if cfg.seed is not None:
        request["seed"] = cfg.seed

    # JSON mode enabled if requested
    if json_mode:
        request["response_format"] = {"type": "json_object"}

    response = client.chat.completions.create(**request)

    # Return the text output
    return response.choices[0].message.content or ""


# Structured completion: the SDK validates the reply against a pydantic model
def parse_structured(
    client: Any,
    model: str,
    messages: List[Dict[str, str]],
    response_format: Any,
    store: bool = False,
    metadata: Optional[Dict[str, str]] = None,
) -> Any:

    request: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "response_format": response_format,
    }

    # Persist the call only when asked to
    if store:
        request["store"] = True
        if metadata:
            request["metadata"] = metadata

    completion = client.chat.completions.parse(**request)
    return completion.choices[0].message

