from dweetr.core.access import (
    ControlFields,
    VisibilityFilter,
    generate_token,
    split_control_fields,
)


class TestSplitControlFields:
    def test_plain_payload_is_public(self):
        control, payload = split_control_fields({"temp": "21", "unit": "c"})
        assert control == ControlFields(is_private=False, auth_token=None)
        assert payload == {"temp": "21", "unit": "c"}

    def test_private_one_turns_private_and_is_stripped(self):
        control, payload = split_control_fields({"temp": "23", "private": "1"})
        assert control.is_private is True
        assert payload == {"temp": "23"}

    def test_other_private_values_are_public_and_still_stripped(self):
        for value in ("0", "true", "yes", ""):
            control, payload = split_control_fields({"temp": "23", "private": value})
            assert control.is_private is False
            assert "private" not in payload

    def test_auth_is_always_stripped(self):
        control, payload = split_control_fields({"auth": "forged", "temp": "1"})
        assert control.auth_token == "forged"
        assert payload == {"temp": "1"}

    def test_only_control_keys_leaves_empty_payload(self):
        _, payload = split_control_fields({"private": "1", "auth": "x"})
        assert payload == {}

    def test_key_order_is_preserved(self):
        _, payload = split_control_fields({"b": "2", "private": "1", "a": "1", "c": "3"})
        assert list(payload) == ["b", "a", "c"]


class TestVisibilityFilter:
    def test_no_token_is_public_only(self):
        assert VisibilityFilter.for_token(None).public_only

    def test_empty_token_is_same_as_none(self):
        assert VisibilityFilter.for_token("") == VisibilityFilter.for_token(None)

    def test_token_is_kept_verbatim(self):
        f = VisibilityFilter.for_token("AbC123")
        assert not f.public_only
        assert f.token == "AbC123"


def test_generate_token_is_random_hex():
    tokens = {generate_token() for _ in range(500)}
    assert len(tokens) == 500
    for token in tokens:
        assert len(token) == 32
        int(token, 16)
