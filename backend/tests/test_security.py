from datetime import timedelta

from export_urls.core.security import (
    create_access_token,
    create_action_token,
    decode_token,
    verify_action_token,
)


def test_action_token_round_trip():
    token = create_action_token(7, "export_urls_ajax_nonce")
    assert verify_action_token(token, 7, "export_urls_ajax_nonce")


def test_action_token_rejects_other_action_or_user():
    token = create_action_token(7, "export_urls_ajax_nonce")
    assert not verify_action_token(token, 7, "export_media_ajax_nonce")
    assert not verify_action_token(token, 8, "export_urls_ajax_nonce")


def test_action_token_expires():
    token = create_action_token(7, "export_media_ajax_nonce", expires_delta=timedelta(seconds=-1))
    assert not verify_action_token(token, 7, "export_media_ajax_nonce")


def test_access_token_is_not_an_action_token():
    token = create_access_token({"sub": "7", "action": "export_urls_ajax_nonce"})
    assert not verify_action_token(token, 7, "export_urls_ajax_nonce")
    assert not verify_action_token(None, 7, "export_urls_ajax_nonce")
    assert not verify_action_token("garbage", 7, "export_urls_ajax_nonce")


def test_decode_token_rejects_tampering():
    token = create_access_token({"sub": "1"})
    assert decode_token(token)["sub"] == "1"
    assert decode_token(token[:-2] + "xx") is None
