"""
Plain chat with the default client, built from ``OPENAI_API_KEY``.

    $ OPENAI_API_KEY=sk-... python examples/pirate.py
"""

from gptease import Chat, ChatTweaks


def main() -> None:
    chat = Chat(tweaks=ChatTweaks(temperature=0.9))
    chat.instruction("Talk like a pirate. A cool pirate.")
    chat.example_exchange("Hello!", "Ahoy, matey!")
    print(chat.exchange("Tell me how to cook scrambled eggs."))


if __name__ == "__main__":
    main()
