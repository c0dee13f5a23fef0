#!/usr/bin/env python3
"""
Basic usage examples for the Gridy ID Python client library.

Credentials are read from GRIDY_API_USER / GRIDY_API_SECRET; set GRIDY_HOST
to point at another environment (the UAT host is used by default here).
"""

import asyncio
import sys

from gridy_client import (
    ApiError,
    ApiRequestType,
    Configuration,
    GridyClient,
    GridyClientError,
    HOST_UAT,
)


def main():
    """Run basic usage examples."""

    config = Configuration.from_env(host=HOST_UAT)

    print("=== Gridy ID Python Client Basic Usage Examples ===\n")
    print(config.to_debug_report())

    with GridyClient(config) as client:
        try:
            print("1. Fetching service time...")
            print(f"   {client.time()}\n")

            print("2. Creating a challenge...")
            payload, status, _ = client.challenge_with_http_info({
                "apiUser": config.api_user,
                "type": ApiRequestType.CHALLENGE_NEW,
                "body": {"userId": "demo-user"},
            })
            print(f"   [{status}] {payload}\n")
        except ApiError as e:
            print(f"   ✗ Service error {e.status_code}: {e.payload or e.raw_body!r}")
            return 1
        except GridyClientError as e:
            print(f"   ✗ Request failed: {e}")
            return 1

    print("3. Same call through asyncio...")
    asyncio.run(async_example(config))
    return 0


async def async_example(config: Configuration):
    async with GridyClient(config) as client:
        try:
            print(f"   {await client.time_async()}")
        except GridyClientError as e:
            print(f"   ✗ Request failed: {e}")


if __name__ == "__main__":
    sys.exit(main())
