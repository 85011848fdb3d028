from openai import OpenAIError

from llm_evals.config import create_client, load_api_key
from llm_evals.errors import EvalError
from llm_evals.models.profile_extractor import extract_user_profile_unstructured


def main():
    print("DEMONSTRATING UNSTRUCTURED OUTPUTS\n")

    try:
        client = create_client(load_api_key())
        # three calls to show the layout changes between answers
        answers = extract_user_profile_unstructured(client, attempts=3)
    except (EvalError, OpenAIError) as e:
        print("Error running demo:", e)
        return

    for i, answer in enumerate(answers, 1):
        print(f"Attempt {i}:")
        print(answer)
        print("---")


if __name__ == "__main__":
    main()
