import json

from openai import OpenAIError

from llm_evals.config import create_client, load_api_key
from llm_evals.errors import EvalError
from llm_evals.models.profile_extractor import extract_user_profile_structured


def main():
    print("DEMONSTRATING STRUCTURED OUTPUTS\n")

    try:
        client = create_client(load_api_key())
        # three calls to show the output is consistent
        profiles = extract_user_profile_structured(client, attempts=3)
    except (EvalError, OpenAIError) as e:
        print("Error running demo:", e)
        return

    for i, profile in enumerate(profiles, 1):
        print(f"Attempt {i}:")
        print(json.dumps(profile.model_dump(), indent=2))
        print("---")


if __name__ == "__main__":
    main()
