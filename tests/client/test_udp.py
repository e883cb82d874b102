"""End-to-end tests over a real UDP socket on the loopback interface."""

import anyio
import pytest
from anyio.abc import SocketAttribute, UDPSocket

from nsm.client.connect import connect
from nsm.client.options import ClientOptions
from nsm.client.session import ClientSession
from nsm.client.settings import NsmSettings
from nsm.client.udp import UdpTransport
from nsm.shared.message import Message, decode_datagram, encode_message
from nsm.types import ClientCapability, ClientState, ServerCapability


async def receive_messages(server: UDPSocket) -> tuple[list[Message], tuple[str, int]]:
    datagram, address = await server.receive()
    return decode_datagram(datagram), address


@pytest.mark.anyio
async def test_connect_and_save_over_udp(monkeypatch: pytest.MonkeyPatch):
    saves = 0
    received: list[Message] = []

    async def open_project(project_path: str, display_name: str, client_id: str) -> None:  # pragma: no cover
        pass

    async def save_project() -> None:
        nonlocal saves
        saves += 1

    async def fake_nsmd(server: UDPSocket) -> None:
        [announce], (host, port) = await receive_messages(server)
        received.append(announce)
        reply = Message("/reply", ("/nsm/server/announce", "Welcome", "Fake NSM", ":server_control:"))
        await server.sendto(encode_message(reply), host, port)
        await server.sendto(encode_message(Message("/nsm/client/save")), host, port)
        messages, _ = await receive_messages(server)
        received.extend(messages)

    options = ClientOptions(
        capabilities=(ClientCapability.SWITCH,),
        open_callback=open_project,
        save_callback=save_project,
    )
    client = ClientSession("UDP App", options, executable="udp-app", pid=99)

    async with await anyio.create_udp_socket(local_host="127.0.0.1") as server:
        monkeypatch.setenv("NSM_URL", f"osc.udp://127.0.0.1:{server.extra(SocketAttribute.local_port)}/")
        settings = NsmSettings(connect_timeout=2, announce_timeout=2, poll_interval=0.01)

        async with anyio.create_task_group() as tg:
            tg.start_soon(fake_nsmd, server)
            with anyio.fail_after(5):
                async with connect(client, settings=settings):
                    assert client.state is ClientState.CONNECTED
                    assert client.server_name == "Fake NSM"
                    assert client.server_capabilities == {ServerCapability.SERVER_CONTROL}
                    while len(received) < 2:
                        await anyio.sleep(0.01)

    assert received == [
        Message("/nsm/server/announce", ("UDP App", ":switch:", "udp-app", 1, 0, 99)),
        Message("/reply", ("/nsm/client/save", "ok")),
    ]
    assert saves == 1


@pytest.mark.anyio
async def test_transport_reports_connected_while_open():
    async with await anyio.create_udp_socket(local_host="127.0.0.1") as server:
        transport = UdpTransport("127.0.0.1", server.extra(SocketAttribute.local_port))
        assert not transport.connected

        async with transport as (_, write_stream):
            with anyio.fail_after(1):
                while not transport.connected:
                    await anyio.sleep(0.01)
            await write_stream.send(Message("/nsm/client/is_dirty"))
            messages, _ = await receive_messages(server)

        assert messages == [Message("/nsm/client/is_dirty")]
        assert not transport.connected
