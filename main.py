import asyncio
import os

from dotenv import load_dotenv

from src.second_brain.logging_setup import configure_logging
from src.second_brain.service import load_config
from src.second_brain.workspace import Workspace, store_from_config


async def main():
    """
    Demonstration run: hydrate the workspace, capture a note and a task, and
    ask the assistant for a plan. Run it twice to see the state survive.
    """
    load_dotenv(".env.local", override=False)
    load_dotenv(".env", override=False)
    cfg = load_config(os.getenv("SECOND_BRAIN_CONFIG"))
    configure_logging(cfg.get("log_file"))

    workspace = Workspace(store_from_config(cfg.get("storage")))
    await workspace.hydrate()
    print(f"Loaded {len(workspace.notes.list())} notes and {len(workspace.tasks.list())} open tasks")

    workspace.notes.create("Weekly review", "Collect loose ends from the inbox.", tags=["ritual"])
    workspace.tasks.create("Draft project brief", priority="high")

    user_request = "help me plan tomorrow"
    print(f"You: {user_request}")
    answer = workspace.chat.send(user_request)
    print(f"Aurora: {answer.content}")

    print("\n--- State After Execution ---")
    print(f"Notes: {[n.title for n in workspace.notes.list()]}")
    print(f"Tasks: {workspace.tasks.stats()}")
    print(f"Chat messages: {len(workspace.chat.messages())}")


if __name__ == "__main__":
    asyncio.run(main())
