"""Console front end: reads user input and prints the reply as it streams."""

import argparse
import asyncio
import logging
import sys

from llamachat.config import ChatConfig, ConfigurationError
from llamachat.message import MessageRole
from llamachat.session import ChatSession
from llamachat.transcript import Transcript

logger = logging.getLogger(__name__)

QUIT_COMMANDS = ("/quit", "/exit")


def configure_logging(level: int = logging.INFO, log_file: str = "llamachat.log") -> None:
    logging.basicConfig(
        level=level,
        format='%(asctime)s:%(name)s:%(levelname)s:%(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )


class TranscriptPrinter:
    """Transcript listener that writes only what is new since the last update.

    User messages are not echoed; the terminal already shows them.
    """

    def __init__(self, out=None):
        self.out = out or sys.stdout
        self._printed: dict[str, int] = {}
        self._current: str | None = None

    def __call__(self, transcript: Transcript) -> None:
        for message in transcript.messages:
            if message.role != MessageRole.ASSISTANT:
                continue
            done = self._printed.get(message.id, 0)
            if done == len(message.content):
                continue
            if self._current != message.id:
                if self._current is not None:
                    self.out.write("\n")
                self.out.write("Assistant: ")
                self._current = message.id
            self.out.write(message.content[done:])
            self._printed[message.id] = len(message.content)
        self.out.flush()

    def end_turn(self) -> None:
        if self._current is not None:
            self.out.write("\n\n")
            self.out.flush()
        self._current = None


async def chat_loop(session: ChatSession, printer: TranscriptPrinter, read_line=input) -> None:
    session.subscribe(printer)
    while True:
        try:
            text = await asyncio.to_thread(read_line, "User: ")
        except EOFError:
            break
        if text.strip() in QUIT_COMMANDS:
            break
        await session.send(text)
        printer.end_turn()
    print("Farewell!")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="llamachat",
        description="Chat with a model served by a Llama Stack or OpenAI-compatible server.",
    )
    parser.add_argument(
        "--debug", action="store_true",
        help="use the built-in debug endpoint and model instead of INFERENCE_URL / MODEL_ID",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="log at DEBUG level")
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        config = ChatConfig.from_env(debug=args.debug or None)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    logger.info(f"Using model {config.model_id} at {config.inference_url}")
    session = ChatSession(config)
    try:
        asyncio.run(chat_loop(session, TranscriptPrinter()))
    except KeyboardInterrupt:
        print("\nFarewell!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
