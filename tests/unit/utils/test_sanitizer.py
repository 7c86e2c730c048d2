"""Тесты маскирования чувствительных данных."""

from bridge_client.utils.sanitizer import mask_sensitive_data

MASK = "***REDACTED***"


def test_mask_dict_keys_case_and_separator_insensitive():
    data = {
        "password": "hunter2",
        "sessionId": "s-1",
        "session_id": "s-2",
        "Authorization": "Bearer abc",
        "limit": 20,
    }
    assert mask_sensitive_data(data) == {
        "password": MASK,
        "sessionId": MASK,
        "session_id": MASK,
        "Authorization": MASK,
        "limit": 20,
    }


def test_mask_message_payloads():
    data = {"conversationId": "c1", "plaintextB64": "aGVsbG8="}
    assert mask_sensitive_data(data) == {"conversationId": "c1", "plaintextB64": MASK}


def test_mask_nested():
    data = {"body": {"items": [{"payloadCiphertextB64": "eA=="}]}}
    assert mask_sensitive_data(data) == {"body": {"items": [{"payloadCiphertextB64": MASK}]}}


def test_mask_strings():
    assert mask_sensitive_data("Bearer abc.def") == f"Bearer {MASK}"
    assert mask_sensitive_data("password=hunter2") == f"password={MASK}"
    assert mask_sensitive_data("api_key: xyz") == f"api_key: {MASK}"


def test_scalars_untouched():
    assert mask_sensitive_data(None) is None
    assert mask_sensitive_data(42) == 42
    assert mask_sensitive_data(True) is True


def test_tuple_type_preserved():
    assert mask_sensitive_data(("a", "Bearer t")) == ("a", f"Bearer {MASK}")


def test_mask_session_id_in_text():
    text = 'session/issue returned {"sessionId": "s-123", "serverTime": "t"}'
    assert mask_sensitive_data(text) == f'session/issue returned {{"sessionId": "{MASK}", "serverTime": "t"}}'


def test_custom_mask():
    assert mask_sensitive_data({"token": "abc", "note": "Bearer xyz"}, mask="<hidden>") == {
        "token": "<hidden>",
        "note": "Bearer <hidden>",
    }
