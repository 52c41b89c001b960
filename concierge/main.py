"""CLI entry point for the Wings9 concierge.

A terminal chat loop for trying the concierge locally.  For production,
use the FastAPI server (concierge/server.py).

Usage:
    python -m concierge.main            # normal mode (quiet)
    python -m concierge.main --debug    # debug mode (shows retrieval and API calls)
"""

from __future__ import annotations

import argparse
import logging
import uuid

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ASSISTANT = "Concierge"


def _configure_logging(debug: bool = False) -> None:
    """Set up logging: WARNING by default, DEBUG when --debug is passed."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    )

    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger("concierge").setLevel(logging.DEBUG if debug else logging.INFO)


def main():
    """Run the interactive CLI chat loop."""
    parser = argparse.ArgumentParser(description="Wings9 Concierge CLI")
    parser.add_argument(
        "--debug", action="store_true",
        help="Show all log messages including HTTP requests",
    )
    args = parser.parse_args()

    load_dotenv()
    _configure_logging(debug=args.debug)

    # Config is read at import time, after .env has been loaded
    from concierge.agent import create_concierge_agent  # noqa: PLC0415

    print("\n" + "=" * 60)
    print("  Wings9 Concierge - CLI Chat")
    print("=" * 60)
    print("  Type your message and press Enter.")
    print("  Commands: 'quit' to exit, 'new' for a new session.")
    print("=" * 60 + "\n")

    agent = create_concierge_agent()
    session_id = str(uuid.uuid4())
    logger.info("Started new session: %s", session_id)

    while True:
        try:
            user_input = input("You: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n\nGoodbye!")
            break

        if not user_input:
            continue

        if user_input.lower() in ("exit", "quit", "q"):
            print("\nThank you for visiting Wings9. Goodbye!")
            break

        if user_input.lower() == "new":
            session_id = str(uuid.uuid4())
            print(f"\n>> New session started: {session_id[:8]}...\n")
            continue

        try:
            result = agent.invoke({"session_id": session_id, "message": user_input})
        except KeyboardInterrupt:
            print("\n\nGoodbye!")
            break
        except Exception as e:
            logger.exception("Error processing message")
            print(f"\n{ASSISTANT}: I'm sorry, something went wrong: {e}")
            print("     Please try again or type 'new' to start a fresh session.\n")
            continue

        reply = result.get("reply") or "I'm sorry, I wasn't able to generate a response. Please try again."
        print(f"\n{ASSISTANT}: {reply}\n")


if __name__ == "__main__":
    main()
