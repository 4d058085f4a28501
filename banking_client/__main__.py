#!/usr/bin/env python3
"""Run the banking client headless, logging every page render"""

import asyncio

from banking_client.app import create_client
from banking_client.config import get_config
from banking_client.logging_config import setup_logging
from banking_client.presentation import LogPresenter
from banking_client.rendering import use_system_locale


async def run() -> None:
    config = get_config()
    logger = setup_logging(config.log_level, log_format=config.log_format)
    use_system_locale()
    logger.info(f"Banking API at {config.base_url}")

    async with create_client(config, presenter=LogPresenter(logger)):
        # Health polling runs until interrupted
        await asyncio.Event().wait()


def main():
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        print("\n👋 Shutting down banking client...")


if __name__ == "__main__":
    main()
