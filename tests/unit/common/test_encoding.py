import base64

import pytest
from hypothesis import given
from hypothesis import strategies as st

from kms_sdk.common.encoding import (
    b64encode_text,
    decode_plaintext,
    is_base64,
    to_ciphertext_bytes,
    to_plaintext_bytes,
)
from kms_sdk.handlers.exceptions import InvalidCiphertextError, InvalidPayloadError


class TestIsBase64:
    @given(data=st.binary(min_size=1))
    def test_encoded_bytes_are_base64(self, data):
        assert is_base64(base64.b64encode(data).decode("ascii"))

    @pytest.mark.parametrize("value", ["", None, "hello world", "abc", "####", 42])
    def test_non_base64(self, value):
        assert not is_base64(value)


class TestPlaintext:
    def test_string_is_utf8_encoded_not_base64_decoded(self):
        # "aGVsbG8=" is valid base64 but a plaintext string is taken literally
        assert to_plaintext_bytes("aGVsbG8=") == b"aGVsbG8="
        assert to_plaintext_bytes("héllo") == "héllo".encode("utf-8")

    def test_bytes_pass_through(self):
        assert to_plaintext_bytes(b"\x00\x01") == b"\x00\x01"
        assert to_plaintext_bytes(bytearray(b"ab")) == b"ab"

    @pytest.mark.parametrize("value", [None, "", b""])
    def test_empty(self, value):
        with pytest.raises(InvalidPayloadError, match="No plaintext data provided"):
            to_plaintext_bytes(value)

    @pytest.mark.parametrize("value", [123, {"a": 1}, ["x"]])
    def test_unsupported_type(self, value):
        with pytest.raises(InvalidPayloadError, match="string or bytes"):
            to_plaintext_bytes(value)


class TestCiphertext:
    @given(blob=st.binary(min_size=1))
    def test_base64_string_is_decoded(self, blob):
        assert to_ciphertext_bytes(b64encode_text(blob)) == blob

    def test_bytes_pass_through(self):
        assert to_ciphertext_bytes(b"blob") == b"blob"

    @pytest.mark.parametrize("value", [None, "", b""])
    def test_empty(self, value):
        with pytest.raises(InvalidPayloadError, match="No ciphertext data provided"):
            to_ciphertext_bytes(value)

    def test_non_base64_string(self):
        with pytest.raises(InvalidCiphertextError, match="base64"):
            to_ciphertext_bytes("not base64!")

    def test_unsupported_type(self):
        with pytest.raises(InvalidCiphertextError):
            to_ciphertext_bytes(3.14)


class TestDecodePlaintext:
    @given(text=st.text())
    def test_utf8(self, text):
        assert decode_plaintext(text.encode("utf-8")) == text

    def test_invalid_utf8(self):
        with pytest.raises(InvalidPayloadError, match="not valid UTF-8"):
            decode_plaintext(b"\xff\xfe\xfa")
