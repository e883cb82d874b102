import pytest
from pythonosc.osc_bundle_builder import IMMEDIATELY, OscBundleBuilder
from pythonosc.osc_message_builder import OscMessageBuilder

from nsm.shared.message import Message, decode_datagram, encode_message


def test_announce_message_survives_the_wire():
    message = Message("/nsm/server/announce", ("App", ":dirty:", "/usr/bin/app", 1, 0, 4242))

    assert decode_datagram(encode_message(message)) == [message]


def test_float_argument():
    [decoded] = decode_datagram(encode_message(Message("/nsm/client/progress", (0.5,))))

    assert decoded.args == (0.5,)


def test_message_without_arguments():
    assert decode_datagram(encode_message(Message("/nsm/client/is_dirty"))) == [Message("/nsm/client/is_dirty")]


def test_boolean_arguments_are_rejected():
    with pytest.raises(TypeError):
        encode_message(Message("/nsm/client/is_dirty", (True,)))


def test_unsupported_argument_type():
    with pytest.raises(TypeError, match="bytes"):
        encode_message(Message("/reply", (b"raw",)))


def test_malformed_datagram_decodes_to_nothing():
    assert decode_datagram(b"not an osc packet") == []
    assert decode_datagram(b"") == []


def test_bundle_is_flattened():
    bundle = OscBundleBuilder(IMMEDIATELY)
    for address in ("/nsm/client/save", "/nsm/client/session_is_loaded"):
        bundle.add_content(OscMessageBuilder(address=address).build())

    decoded = decode_datagram(bundle.build().dgram)

    assert [m.address for m in decoded] == ["/nsm/client/save", "/nsm/client/session_is_loaded"]


def test_str_renders_address_and_arguments():
    assert str(Message("/reply", ("/nsm/client/save", "ok"))) == "/reply '/nsm/client/save' 'ok'"
    assert str(Message("/nsm/client/is_clean")) == "/nsm/client/is_clean"
