import pytest

from conftest import FakeClient, parsed_message
from llm_evals.errors import MalformedResponseError, ModelRefusalError
from llm_evals.models.llm_client import LLMConfig, call_llm
from llm_evals.models.profile_extractor import (
    UserProfile,
    extract_user_profile_structured,
    extract_user_profile_unstructured,
)

JANE = UserProfile(
    full_name="Jane Smith",
    location="Seattle",
    years_of_experience=5,
    programming_languages=["JavaScript", "Python"],
    email="jane.smith@email.com",
    github_username="janedev",
)


def test_structured_calls_return_the_same_shape():
    client = FakeClient(parse_fn=lambda **kw: parsed_message(parsed=JANE))

    profiles = extract_user_profile_structured(client, attempts=3)

    assert profiles == [JANE, JANE, JANE]
    assert all(c["response_format"] is UserProfile for c in client.parse_calls)
    assert all(c["model"] == "gpt-4o" for c in client.parse_calls)
    assert "Jane Smith" in client.parse_calls[0]["messages"][1]["content"]


def test_structured_refusal_raises():
    client = FakeClient(parse_fn=lambda **kw: parsed_message(refusal="Cannot share personal data."))

    with pytest.raises(ModelRefusalError):
        extract_user_profile_structured(client)


def test_structured_without_payload_raises():
    client = FakeClient(parse_fn=lambda **kw: parsed_message())

    with pytest.raises(MalformedResponseError):
        extract_user_profile_structured(client)


def test_unstructured_returns_raw_text():
    replies = iter(["name: Jane Smith\nemail: jane.smith@email.com", "Jane Smith, 5 years", "- Jane"])
    client = FakeClient(create_fn=lambda **kw: next(replies))

    answers = extract_user_profile_unstructured(client, attempts=3)

    assert answers == ["name: Jane Smith\nemail: jane.smith@email.com", "Jane Smith, 5 years", "- Jane"]
    assert all("response_format" not in c for c in client.create_calls)


def test_call_llm_only_sends_optional_knobs_when_set():
    client = FakeClient(create_fn=lambda **kw: "{}")

    call_llm(client, "sys", "user", LLMConfig(model="gpt-4o-mini"))
    call_llm(client, "sys", "user", LLMConfig(model="gpt-4o-mini", temperature=0.2, seed=7), json_mode=True)

    plain, tuned = client.create_calls
    assert "temperature" not in plain and "seed" not in plain and "response_format" not in plain
    assert tuned["temperature"] == 0.2
    assert tuned["seed"] == 7
    assert tuned["response_format"] == {"type": "json_object"}
    assert tuned["messages"] == [{"role": "system", "content": "sys"}, {"role": "user", "content": "user"}]
