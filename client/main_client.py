#!/usr/bin/env python3
"""
Broadcast Chat Client - Main Entry Point

Connects to the chat server, authenticates, then relays stdin lines as chat
messages and prints everything the server broadcasts.
"""

import argparse
import asyncio
import getpass
import sys

from client.chat.chat_client import ChatClient
from client.utils.config import ClientConfig
from common.constants import DEFAULT_HOST, DEFAULT_PORT


async def run(config: ClientConfig) -> int:
    client = ChatClient(config)
    if not await client.connect():
        print(client.last_error)
        return 1
    print(f"[INFO] Connected to {config.get_url()} as {config.username}")
    await client.run_interactive()
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description='Broadcast Chat Client')
    parser.add_argument('--host', type=str, default=DEFAULT_HOST,
                        help=f'Server address (default: {DEFAULT_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'Server port (default: {DEFAULT_PORT})')
    parser.add_argument('--username', type=str, required=True,
                        help='Username to log in (or register) as')
    parser.add_argument('--password', type=str, default=None,
                        help='Password (prompted when omitted)')
    args = parser.parse_args(argv)

    password = args.password if args.password is not None else getpass.getpass('Password: ')
    config = ClientConfig(args.username, password, args.host, args.port)

    try:
        sys.exit(asyncio.run(run(config)))
    except KeyboardInterrupt:
        print("\n[INFO] Disconnected")
    except OSError as e:
        print(f"[ERROR] Could not connect to {config.get_url()}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
