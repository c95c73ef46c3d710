import urllib.error
from unittest import mock

import pytest

from a2emu.fujinet import (
    METHOD_GET,
    ErrorCode,
    FnJson,
    HttpProtocol,
    ProtocolError,
    get_json_value,
    instantiate_protocol,
)


def run_queries(message, queries):
    js = FnJson()
    js.parse(message.encode())
    for query, expected in queries:
        js.query(query.encode())
        assert js.result.decode() == expected, query


def test_query_map():
    message = (
        '{"timestamp": 1667218311, "message": "success", "iss_position": '
        '{"latitude": "21.3276", "longitude": "-39.4989"}}'
    )
    run_queries(
        message,
        [
            ("/iss_position/longitude", "-39.4989"),
            ("/iss_position/latitude", "21.3276"),
            ("/timestamp", "1667218311"),
        ],
    )


ARRAY_MESSAGE = """
[
  {
    "id": "1000",
    "created_at": "2022-05-25T07:00:06.000Z",
    "in_reply_to_id": null,
    "sensitive": false,
    "url": "https://example.com/statuses/1000",
    "replies_count": 0,
    "content": "<p>Floppies! - Robert Davis</p>",
    "account": {
      "id": "2000",
      "username": "themes",
      "display_name": "Macintosh Themes",
      "bot": true,
      "followers_count": 157,
      "emojis": [],
      "fields": []
    },
    "media_attachments": [
      {
        "type": "image",
        "meta": {"original": {"width": 213, "height": 181, "aspect": 1.1767955801104972}}
      }
    ],
    "card": null
  }
]"""


def test_query_array():
    run_queries(
        ARRAY_MESSAGE,
        [
            ("/0/account/display_name", "Macintosh Themes"),
            ("/0/created_at", "2022-05-25T07:00:06.000Z"),
            ("/0/content", "<p>Floppies! - Robert Davis</p>"),
            ("/0/nonexistent", "NULL"),
            ("/1/account/display_name", "NULL"),
            ("/-1/account/display_name", "NULL"),
            ("/zz/account/display_name", "NULL"),
        ],
    )


def test_query_returns_result_and_handles_terminator():
    js = FnJson()
    js.parse(b'{"timestamp": 1667218311}')
    assert js.query(b"/timestamp\x00") == b"1667218311"
    assert js.query(b"/timestamp/0") == b"1667218311"
    assert js.query(b"timestamp/") == b"1667218311"


def test_query_through_leaf_is_null():
    js = FnJson()
    js.parse(b'{"a": 5}')
    assert js.query(b"/a/b") == b"NULL"


def test_query_without_parse_is_null():
    assert FnJson().query(b"/anything") == b"NULL"


def test_parse_error():
    js = FnJson()
    with pytest.raises(ProtocolError) as info:
        js.parse(b"{not json")
    assert info.value.code is ErrorCode.JSON_PARSE_ERROR


def test_parse_rejects_nan():
    with pytest.raises(ProtocolError):
        FnJson().parse(b"[NaN]")


def test_get_json_value_scalars():
    assert get_json_value(None) == b"NULL"
    assert get_json_value(True) == b"TRUE"
    assert get_json_value(False) == b"FALSE"
    assert get_json_value(1.9) == b"1"
    assert get_json_value(-1.9) == b"-1"
    assert get_json_value("text") == b"text"


def test_get_json_value_containers_concatenate():
    assert get_json_value(["a", 1, None]) == b"a1NULL"
    assert get_json_value({"k": "v", "n": False}) == b"kvnFALSE"


def test_instantiate_protocol_http_and_https():
    for url in ("http://example.com/data", "HTTPS://example.com/data"):
        protocol = instantiate_protocol(url, METHOD_GET)
        assert isinstance(protocol, HttpProtocol)
        assert protocol.method == METHOD_GET


def test_instantiate_protocol_unknown_scheme():
    with pytest.raises(ProtocolError) as info:
        instantiate_protocol("ftp://example.com/file", METHOD_GET)
    assert info.value.code is ErrorCode.GENERAL


def test_http_read_all_get():
    protocol = HttpProtocol(METHOD_GET)
    protocol.open("http://example.com/data")
    with mock.patch("urllib.request.urlopen") as urlopen:
        urlopen.return_value.__enter__.return_value.read.return_value = b"payload"
        assert protocol.read_all() == b"payload"
        urlopen.assert_called_once_with("http://example.com/data")


def test_http_read_all_failure():
    protocol = HttpProtocol(METHOD_GET)
    protocol.open("http://example.com/data")
    with mock.patch("urllib.request.urlopen", side_effect=urllib.error.URLError("down")):
        with pytest.raises(ProtocolError) as info:
            protocol.read_all()
    assert info.value.code is ErrorCode.GENERAL


def test_http_read_all_other_method_not_implemented():
    protocol = HttpProtocol(METHOD_GET + 1)
    protocol.open("http://example.com/data")
    with pytest.raises(ProtocolError) as info:
        protocol.read_all()
    assert info.value.code is ErrorCode.NOT_IMPLEMENTED