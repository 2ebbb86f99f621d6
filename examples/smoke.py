import asyncio

from openclaw_client import GatewayClient, GatewaySettings, Message


async def main() -> None:
    config = GatewaySettings().to_config()
    client = GatewayClient()

    if not await client.check_health(config):
        print("Gateway unreachable:", config.gateway_url)
        return

    messages = [Message(role="user", content="Say hello in five words.")]
    print("blocking:", await client.chat(messages, config))

    print("streaming: ", end="")
    await client.chat_stream(
        messages,
        lambda chunk: print(chunk, end="", flush=True),
        lambda: print(),
        config,
    )


if __name__ == "__main__":
    asyncio.run(main())
