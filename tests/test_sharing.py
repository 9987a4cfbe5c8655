import base64
import json

import pytest

from learnos.errors import ShareTokenError
from learnos.models import SharedData, StudyGuide
from learnos.sharing import build_share_url, decode_token, encode_token, split_share_fragment


def test_round_trip(sample_guide):
    token = encode_token(sample_guide, "Some material")
    assert decode_token(token) == SharedData(guide=sample_guide, material="Some material")


def test_round_trip_non_ascii():
    guide = StudyGuide(title="Études", summary="Ça va → bien", key_concepts=())
    assert decode_token(encode_token(guide, "naïve ✓")).material == "naïve ✓"


def test_token_never_contains_quiz(sample_guide):
    data = json.loads(base64.b64decode(encode_token(sample_guide, "m")))
    assert set(data) == {"guide", "material"}


def test_decode_ignores_key_order(sample_guide):
    payload = {"material": "m", "guide": {"keyConcepts": [], "summary": "S", "title": "T"}}
    token = base64.b64encode(json.dumps(payload).encode()).decode()
    shared = decode_token(token)
    assert shared.guide.title == "T"
    assert shared.material == "m"


def test_build_share_url(sample_guide):
    url = build_share_url(sample_guide, "m", "https://example.com", "/app/")
    assert url.startswith("https://example.com/app/#/view/")
    assert url.endswith(encode_token(sample_guide, "m"))


@pytest.mark.parametrize("token", [
    "not base64!!",
    base64.b64encode(b"\xff\xfe").decode(),
    base64.b64encode(b"{not json").decode(),
    base64.b64encode(json.dumps({"guide": {"title": "T"}, "material": "m"}).encode()).decode(),
    base64.b64encode(json.dumps(["list"]).encode()).decode(),
    "",
])
def test_decode_rejects_bad_tokens(token):
    with pytest.raises(ShareTokenError):
        decode_token(token)


def test_split_share_fragment():
    token, stripped = split_share_fragment("https://example.com/app/#/view/abc=")
    assert token == "abc="
    assert stripped == "https://example.com/app/"


def test_split_keeps_query_string():
    token, stripped = split_share_fragment("https://example.com/?x=1#/view/abc")
    assert token == "abc"
    assert stripped == "https://example.com/?x=1"


def test_split_without_share_prefix():
    assert split_share_fragment("https://example.com/#about") == (None, "https://example.com/#about")
    assert split_share_fragment("https://example.com/") == (None, "https://example.com/")
