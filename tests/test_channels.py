import asyncio

import pytest

from citeflow.channels import Channel, ChannelClosed


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        Channel(0)


@pytest.mark.asyncio
async def test_send_blocks_until_receiver_makes_room():
    channel: Channel[int] = Channel(capacity=1)
    await channel.send(1)

    blocked = asyncio.create_task(channel.send(2))
    await asyncio.sleep(0)
    assert not blocked.done()
    assert len(channel) == 1

    assert await channel.receive() == 1
    await asyncio.wait_for(blocked, timeout=1)
    assert await channel.receive() == 2


@pytest.mark.asyncio
async def test_close_drains_pending_items_then_stops_iteration():
    channel: Channel[str] = Channel(capacity=2)
    await channel.send("a")
    await channel.send("b")
    await channel.close()

    assert [item async for item in channel] == ["a", "b"]
    with pytest.raises(ChannelClosed):
        await channel.receive()


@pytest.mark.asyncio
async def test_close_wakes_blocked_sender_and_receiver():
    full: Channel[int] = Channel(capacity=1)
    await full.send(1)
    empty: Channel[int] = Channel(capacity=1)

    sender = asyncio.create_task(full.send(2))
    receiver = asyncio.create_task(empty.receive())
    await asyncio.sleep(0)

    await full.close()
    await empty.close()

    with pytest.raises(ChannelClosed):
        await sender
    with pytest.raises(ChannelClosed):
        await receiver


@pytest.mark.asyncio
async def test_send_after_close_fails():
    channel: Channel[int] = Channel()
    await channel.close()
    await channel.close()

    with pytest.raises(ChannelClosed):
        await channel.send(1)


@pytest.mark.asyncio
async def test_offer_never_waits():
    channel: Channel[int] = Channel(capacity=1)

    assert channel.offer(1)
    assert not channel.offer(2)
    await channel.close()
    assert not channel.offer(3)
    assert [item async for item in channel] == [1]
