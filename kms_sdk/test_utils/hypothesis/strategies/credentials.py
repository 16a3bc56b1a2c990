from typing import Any, Dict

from hypothesis import strategies as st

from kms_sdk.credentials.types import CredentialReference, CredentialSourceKind

# Identifier-like segments so that dotted paths split predictably
path_segment = st.from_regex(r"[A-Za-z_][A-Za-z0-9_]{0,15}", fullmatch=True)

credential_value = st.text(
    alphabet=st.characters(exclude_categories=("Cs",)), min_size=1, max_size=64
)


@st.composite
def dotted_path(draw, min_segments: int = 1, max_segments: int = 4) -> str:
    """Generate ``a.b.c`` style lookup paths."""
    segments = draw(
        st.lists(path_segment, min_size=min_segments, max_size=max_segments)
    )
    return ".".join(segments)


@st.composite
def nested_store_entry(draw) -> Dict[str, Any]:
    """Generate a dotted path, the value stored under it and the nested dict holding it."""
    path = draw(dotted_path())
    value = draw(credential_value)
    segments = path.split(".")

    nested: Any = value
    for segment in reversed(segments[1:]):
        nested = {segment: nested}
    return {"path": path, "value": value, "key": segments[0], "stored": nested}


@st.composite
def source_kind_tag(draw) -> str:
    """Generate a configuration tag for a known source kind."""
    return draw(st.sampled_from([kind.value for kind in CredentialSourceKind]))


@st.composite
def unknown_source_kind_tag(draw) -> str:
    """Generate tags that are not any known source kind or alias."""
    known = {"str", "string", "literal", "flow", "global", "env", "msg", "message"}
    return draw(
        st.text(min_size=1, max_size=12).filter(
            lambda tag: tag.strip().lower() not in known
        )
    )


@st.composite
def credential_reference(draw) -> CredentialReference:
    kind = draw(st.sampled_from(list(CredentialSourceKind)))
    return CredentialReference(kind, draw(dotted_path()))
