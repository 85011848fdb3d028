from typing import Any, List

from pydantic import BaseModel, Field

from llm_evals.errors import MalformedResponseError, ModelRefusalError
from llm_evals.models.llm_client import LLMConfig, build_messages, call_llm, parse_structured


# Free text the profile is extracted from
PROFILE_TEXT = """
Hi! I'm Jane Smith, a software developer from Seattle.
I've been coding for 5 years, mainly in JavaScript and Python.
You can reach me at jane.smith@email.com
Github: @janedev
"""

STRUCTURED_SYSTEM_PROMPT = (
    "Extract user profile information into a structured format. "
    "Ensure all fields match the specified schema."
)

UNSTRUCTURED_SYSTEM_PROMPT = (
    "Extract user profile information from the text provided. "
    "Please put each of these fields on a separate line: "
    "name, email, years of experience, programming languages."
)


# Exact structure the structured call must return
class UserProfile(BaseModel):
    full_name: str = Field(description="User's full name")
    location: str = Field(description="User's city or location")
    years_of_experience: float = Field(description="Years of coding experience")
    programming_languages: List[str] = Field(description="Programming languages the user knows")
    email: str = Field(description="User's email address")
    github_username: str = Field(description="User's GitHub username without @ symbol")


# Several calls with a schema: every answer has the same shape
def extract_user_profile_structured(
    client: Any,
    model: str = "gpt-4o",
    attempts: int = 3,
    text: str = PROFILE_TEXT,
) -> List[UserProfile]:

    messages = build_messages(STRUCTURED_SYSTEM_PROMPT, text)
    profiles: List[UserProfile] = []

    for _ in range(attempts):
        message = parse_structured(client, model=model, messages=messages, response_format=UserProfile)

        if getattr(message, "refusal", None):
            raise ModelRefusalError(f"Model {model} refused to extract the profile: {message.refusal}")
        if message.parsed is None:
            raise MalformedResponseError(f"No structured profile returned by {model}")

        profiles.append(message.parsed)

    return profiles


# Same request without a schema: the layout drifts between calls
def extract_user_profile_unstructured(
    client: Any,
    model: str = "gpt-4o",
    attempts: int = 3,
    text: str = PROFILE_TEXT,
) -> List[str]:

    cfg = LLMConfig(model=model)
    return [
        call_llm(client, UNSTRUCTURED_SYSTEM_PROMPT, text, cfg)
        for _ in range(attempts)
    ]
