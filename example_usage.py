# example_usage.py

import asyncio
from dataclasses import dataclass

from http_api_client import ApiClient, ApiClientOptions, LoggingConfig


@dataclass
class NewPost:
    title: str
    body: str
    user_id: int


async def main():
    # Создаем клиент: ProblemDetails парсер и 3 ретрая по умолчанию
    options = ApiClientOptions.create(
        base_url="https://jsonplaceholder.typicode.com",
        camel_case_properties=True,
        logging=LoggingConfig.create(level="DEBUG"),
    )

    async with ApiClient(options) as client:
        print("\n=== GET ===")
        response = await client.get("/posts/1")
        print(f"Status: {response.status_code}")
        print(f"Title: {response.data.value_str('title')}")

        print("\n=== GET after delay ===")
        response = await client.get("/posts/2", delay=0.5)
        print(f"Status: {response.status_code}, retries: {response.retry_count}")

        print("\n=== POST object ===")
        response = await client.post("/posts", NewPost("Test Post", "This is a test", 1))
        print(f"Status: {response.status_code}")
        print(f"Created ID: {response.data.value_str('id')}")

        print("\n=== Failure ===")
        response = await client.get("/missing")
        if not response.is_success:
            print(f"Error: {response.error_message}")

        print(f"\nRequests sent: {client.request_count}")


if __name__ == "__main__":
    asyncio.run(main())
