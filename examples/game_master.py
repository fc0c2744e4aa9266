"""
The model plays game master and rolls dice through a Python function.

    $ OPENAI_API_KEY=sk-... python examples/game_master.py
    $ python examples/game_master.py --provider anthropic --model claude-3-5-haiku-latest
"""

from __future__ import annotations

import argparse
import logging
import random
from dataclasses import dataclass

from gptease import Chat, Provider, create_llm, param, tool

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)


@dataclass
class RollDieArgs:
    max_value: int = param(description="Number of sides on the die")


@tool(name="rollDie", description="Returns a random number between 1 and max_value (inclusive).")
def roll_die(args: RollDieArgs) -> int:
    if args.max_value < 1:
        raise ValueError("max_value must be at least 1")
    value = random.randint(1, args.max_value)
    logger.info("Rolled a %d", value)
    return value


def main(provider: Provider, model: str | None) -> None:
    chat = Chat(create_llm(provider, model), tools=[roll_die], max_rounds=5)
    chat.instruction("You are GM of a role playing game.")
    print(chat.exchange("I swing my sword against the goblin, for 1d10 damage."))


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--provider",
        choices=[p.value for p in Provider],
        default=Provider.OPENAI.value,
    )
    parser.add_argument("--model", default=None)
    args = parser.parse_args()

    main(Provider(args.provider), args.model)
