from typing import Callable, Dict, List

#prompts for the race judge task


def simple_prompt(race: str) -> str:
    return f"""You are an expert racing judge. You will be provided a statement about a race and your job is to determine which competitor is most likely to win.

Judge the following race statement:
{race}

Which competitor is most likely to win? Please only respond with the name of the competitor."""


# few-shot variant
def better_prompt(race: str) -> str:
    return f"""You are an expert racing judge. You will be provided a statement about a race and your job is to determine which competitor is most likely to win.

Examples:
Example 1:
Race: Flash Fiona on Skateboard with two wheels missing, Cowboy Carl riding a horse, Sprinting Sarah on Roller Skates
Likely Winner: Flash Fiona

Example 2:
Race: Cyclist Charlie on a Solar-Powered Bike, Runner Rachel with soleless Shoes, Walker Will on a Segway
Likely Winner: Cyclist Charlie

Example 3:
Race: Diver Dana in a Submersible Scooter, Swimmer Sam swimming with his hands, Snorkeler Nina using airplane airfins
Likely Winner: Diver Dana

Judge the following race statement:
{race}

Which competitor is most likely to win? Please only respond with the name of the competitor."""


# step-by-step variant
def reasoning_prompt(race: str) -> str:
    return f"""You are an expert racing judge. You will be provided a statement about a race and your job is to determine which competitor is most likely to win.

To judge the race, follow these steps:
1. Identify the means of motion for each competitor: are they using their body or using a vehicle.
2. Identify whether the means of motion is used in an adequate environment or in an environment hindering its performance.
3. Identify the top speed of each means of motion.
4. Subtract from the top speed of each means of motion the impediments identified in step 2. Use a rough estimate for each impediment.
5. Pick the fastest net speed and state which competitor uses it. This is the likely winner.

Judge the following race statement:
{race}

Which competitor is most likely to win? Please only respond with the name of the competitor."""


PROMPTS: Dict[str, Callable[[str], str]] = {
    "simple": simple_prompt,
    "better": better_prompt,
    "reasoning": reasoning_prompt,
}


# Race statements and their likely winners, written out by make_races_csv
RACES_DATASET: List[Dict[str, str]] = [
    {
        "race": "Jogging Jack in flip-flops on a sandy beach, Rollerblading Rita on the same sand, Biker Ben on a fat-tire bicycle",
        "likely_winner": "Biker Ben",
    },
    {
        "race": "Paddling Pete in a canoe with one oar, Sailing Sophie on a windless lake, Rowing Rob in a racing shell",
        "likely_winner": "Rowing Rob",
    },
    {
        "race": "Skiing Sam on a grassy hill, Sledding Sally on fresh snow, Hiking Hank in snowshoes",
        "likely_winner": "Sledding Sally",
    },
    {
        "race": "Scooter Steve with a flat tire, Marathon Maria in running shoes, Tricycle Tom pedaling uphill",
        "likely_winner": "Marathon Maria",
    },
    {
        "race": "Pilot Paula in a glider on a calm day, Driver Dan in a go-kart on a dirt track, Skater Kim on a frozen pond",
        "likely_winner": "Driver Dan",
    },
    {
        "race": "Swimmer Sue in a river flowing her way, Kayaker Kyle paddling against the current, Wader Walt in rubber boots",
        "likely_winner": "Swimmer Sue",
    },
]
