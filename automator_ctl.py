#!/usr/bin/env python3
"""
Zoom Automator Control

Simple script to drive a running automator from the command line.
"""

import asyncio
import sys
from pathlib import Path

# Add app to path
sys.path.insert(0, str(Path(__file__).parent))

from app.client import AutomatorClient, AutomatorClientError


COMMANDS = ("status", "login", "join", "leave", "shutdown")


async def run_command(command: str) -> int:
    """Run one control command and print the outcome."""
    async with AutomatorClient() as client:
        if command == "status":
            if not await client.check_health():
                print(f"❌ Zoom automator is not reachable at {client.base_url}")
                return 1
            print(f"📊 Status: {await client.get_status()}")
            return 0

        if command == "login":
            print("🔐 Complete the Zoom sign-in in the browser window that opens...")

        try:
            result = await getattr(client, command)()
        except AutomatorClientError as e:
            print(f"❌ {command} failed [{e.code}]: {e.message}")
            return 1

        print(f"✅ {result.get('message', 'Done')}")
        return 0


def main():
    """Main CLI handler."""
    if len(sys.argv) != 2 or sys.argv[1] == "help":
        print("Zoom Automator Control\n")
        print("Usage:")
        print("  python automator_ctl.py status     # Show automator status")
        print("  python automator_ctl.py login      # Interactive Zoom login (once)")
        print("  python automator_ctl.py join       # Start the presence meeting")
        print("  python automator_ctl.py leave      # End the presence meeting")
        print("  python automator_ctl.py shutdown   # Stop the automator")
        return

    command = sys.argv[1]
    if command not in COMMANDS:
        print(f"Unknown command: {command}")
        print("Run 'python automator_ctl.py help' for usage information")
        sys.exit(2)

    sys.exit(asyncio.run(run_command(command)))


if __name__ == "__main__":
    main()
