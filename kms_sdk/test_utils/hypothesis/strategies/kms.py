from typing import Any, Dict

from hypothesis import strategies as st

from kms_sdk.constants import VALID_AWS_REGIONS

aws_region = st.sampled_from(VALID_AWS_REGIONS)

key_id = st.one_of(
    st.uuids().map(str),
    st.from_regex(r"alias/[a-zA-Z0-9/_-]{1,32}", fullmatch=True),
)

plaintext_text = st.text(
    alphabet=st.characters(exclude_categories=("Cs",)), min_size=1, max_size=256
)

plaintext_bytes = st.binary(min_size=1, max_size=256)

key_spec = st.sampled_from(["AES_256", "AES_128"])


@st.composite
def inbound_message(draw, payload_strategy=plaintext_text) -> Dict[str, Any]:
    """Generate an inbound message carrying ``payload`` and a message id."""
    return {
        "_msgid": draw(st.uuids().map(str)),
        "topic": draw(st.text(max_size=16)),
        "payload": draw(payload_strategy),
    }


@st.composite
def explicit_keys_config(draw) -> Dict[str, Any]:
    """Generate a flat explicit-keys config with literal credentials."""
    return {
        "config": {
            "region": draw(aws_region),
            "useIAMRole": False,
            "accessKeyIdType": "str",
            "secretAccessKeyType": "str",
        },
        "credentials": {
            "accessKeyId": "AKIA" + draw(st.from_regex(r"[A-Z0-9]{16}", fullmatch=True)),
            "secretAccessKey": draw(st.text(min_size=1, max_size=40)),
        },
    }
