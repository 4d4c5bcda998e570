from __future__ import annotations

import base64
import json

import pytest

from phrase_bingo.core import BuildParams, PackBuilder
from phrase_bingo.errors import ShareDecodeError
from phrase_bingo.rng import create_rng
from phrase_bingo.share import ShareEnvelope, decode_card, encode_card, envelope_for


def _token(payload) -> str:
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


def test_card_envelope_survives_encoding(labels):
    result = PackBuilder(rng=create_rng("py_random", 3)).build(
        BuildParams(pool=labels + ["Café ☕", "Joe’s Grows"], quantity=4, title="Friday", sponsor_name="Acme")
    )
    pack = result.pack
    card = pack.cards[2]
    decoded = decode_card(encode_card(envelope_for(pack, card)))
    assert decoded.card_id == card.id
    assert decoded.grid == card.grid
    assert decoded.pack_id == pack.pack_id
    assert decoded.title == "Friday"
    assert decoded.sponsor_name == "Acme"
    assert decoded.to_card() == card


def test_optional_fields_omitted():
    env = ShareEnvelope(pack_id="P", card_id="C", grid=(("a",),))
    payload = json.loads(base64.b64decode(encode_card(env)))
    assert payload["v"] == 1
    assert "title" not in payload
    assert decode_card(encode_card(env)) == env


@pytest.mark.parametrize(
    "token",
    [
        "not base64 at all!",
        base64.b64encode(b"{not json").decode("ascii"),
        _token({"v": 2, "packId": "P", "cardId": "C", "grid": [["a"]]}),
        _token({"v": 1, "packId": "", "cardId": "C", "grid": [["a"]]}),
        _token({"v": 1, "packId": "P", "cardId": "C", "grid": "a"}),
        _token({"v": 1, "packId": "P", "cardId": "C", "grid": [["a", "b"], ["c"]]}),
        _token([1, 2, 3]),
    ],
)
def test_bad_tokens_raise(token):
    with pytest.raises(ShareDecodeError):
        decode_card(token)
