import asyncio
from unittest.mock import patch

import pytest
from hypothesis import given

from kms_sdk.clients.kms import KMSClient, KMSServiceConfig
from kms_sdk.common.exceptions import ClientInitError
from kms_sdk.credentials.context import DictContextStore, MessageExecutionContext
from kms_sdk.credentials.exceptions import MissingCredentialsError, ResolutionError
from kms_sdk.credentials.handle import ACCESS_KEY_ID, SECRET_ACCESS_KEY, SESSION_TOKEN
from kms_sdk.credentials.resolver import CredentialResolver
from kms_sdk.credentials.types import (
    AmbientRole,
    CredentialReference,
    CredentialSourceKind,
    ExplicitKeys,
)
from kms_sdk.test_utils.hypothesis.strategies.kms import explicit_keys_config


def _explicit(access="AKIA...", secret="shhh", token=None):
    return ExplicitKeys(
        access_key_id=CredentialReference.literal(access),
        secret_access_key=CredentialReference.literal(secret),
        session_token=CredentialReference.literal(token) if token else None,
    )


class TestKMSServiceConfig:
    def test_defaults_to_ambient_role(self):
        config = KMSServiceConfig("eu-central-1")
        assert config.auth_mode == AmbientRole()
        assert config.uses_ambient_role

    def test_invalid_region(self):
        with pytest.raises(ClientInitError, match="Invalid AWS region"):
            KMSServiceConfig("nowhere-1")

    def test_invalid_auth_mode(self):
        with pytest.raises(ClientInitError, match="Unsupported auth mode"):
            KMSServiceConfig("eu-central-1", auth_mode="role")  # type: ignore[arg-type]


class TestResolveCredentials:
    def test_ambient_role_never_calls_resolver(self):
        config = KMSServiceConfig("eu-central-1", AmbientRole())
        with patch.object(CredentialResolver, "resolve") as mock_resolve:
            assert config.resolve_credentials(MessageExecutionContext(env={})) is None
        mock_resolve.assert_not_called()

    def test_literal_keys(self):
        config = KMSServiceConfig("eu-central-1", _explicit(token="tok"))
        handle = config.resolve_credentials(MessageExecutionContext(env={}))

        assert handle.get(ACCESS_KEY_ID) == "AKIA..."
        assert handle.get(SECRET_ACCESS_KEY) == "shhh"
        assert handle.get(SESSION_TOKEN) == "tok"

    def test_missing_secret_names_only_secret(self):
        config = KMSServiceConfig(
            "eu-central-1",
            ExplicitKeys(
                access_key_id=CredentialReference.literal("AKIA..."),
                secret_access_key=CredentialReference(CredentialSourceKind.FLOW, "aws.secret"),
            ),
        )
        ctx = MessageExecutionContext(flow_store=DictContextStore({}), env={})

        with pytest.raises(MissingCredentialsError) as exc_info:
            config.resolve_credentials(ctx)

        assert exc_info.value.missing_fields == ["Secret Access Key"]
        assert str(exc_info.value) == "Missing required credentials: Secret Access Key"

    def test_missing_both(self):
        config = KMSServiceConfig(
            "eu-central-1",
            ExplicitKeys(
                access_key_id=CredentialReference(CredentialSourceKind.ENV, "AK"),
                secret_access_key=CredentialReference(CredentialSourceKind.ENV, "SK"),
            ),
        )
        with pytest.raises(MissingCredentialsError) as exc_info:
            config.resolve_credentials(MessageExecutionContext(env={}))
        assert exc_info.value.missing_fields == ["Access Key ID", "Secret Access Key"]

    def test_empty_string_counts_as_missing(self):
        config = KMSServiceConfig(
            "eu-central-1",
            ExplicitKeys(
                access_key_id=CredentialReference(CredentialSourceKind.ENV, "AK"),
                secret_access_key=CredentialReference.literal("shhh"),
            ),
        )
        with pytest.raises(MissingCredentialsError) as exc_info:
            config.resolve_credentials(MessageExecutionContext(env={"AK": ""}))
        assert exc_info.value.missing_fields == ["Access Key ID"]

    def test_non_string_value(self):
        config = KMSServiceConfig(
            "eu-central-1",
            ExplicitKeys(
                access_key_id=CredentialReference(CredentialSourceKind.FLOW, "aws"),
                secret_access_key=CredentialReference.literal("shhh"),
            ),
        )
        ctx = MessageExecutionContext(
            flow_store=DictContextStore({"aws": {"key": "AKIA..."}}), env={}
        )
        with pytest.raises(ResolutionError, match="must resolve to a string"):
            config.resolve_credentials(ctx)

    def test_rotation_takes_effect_next_call(self):
        store = DictContextStore({"aws": {"key": "AKIA-OLD", "secret": "s1"}})
        config = KMSServiceConfig(
            "eu-central-1",
            ExplicitKeys(
                access_key_id=CredentialReference(CredentialSourceKind.FLOW, "aws.key"),
                secret_access_key=CredentialReference(CredentialSourceKind.FLOW, "aws.secret"),
            ),
        )
        ctx = MessageExecutionContext(flow_store=store, env={})

        assert config.resolve_credentials(ctx).get(ACCESS_KEY_ID) == "AKIA-OLD"
        store.set("aws", {"key": "AKIA-NEW", "secret": "s2"})
        assert config.resolve_credentials(ctx).get(ACCESS_KEY_ID) == "AKIA-NEW"


class TestAcquireClient:
    @pytest.mark.asyncio
    async def test_ambient_role_shares_one_client(self, fake_kms):
        config = KMSServiceConfig("eu-central-1")

        async def acquire():
            async with config.acquire_client() as client:
                return client

        clients = await asyncio.gather(*(acquire() for _ in range(5)))

        assert all(client is clients[0] for client in clients)
        assert fake_kms.create_client.call_count == 1
        assert not fake_kms.closed

    @pytest.mark.asyncio
    async def test_explicit_keys_client_per_request(self, fake_kms):
        config = KMSServiceConfig("eu-central-1", _explicit())
        handle = config.resolve_credentials(MessageExecutionContext(env={}))

        async with config.acquire_client(handle) as first:
            assert isinstance(first, KMSClient)
            assert first.credentials is handle
        async with config.acquire_client(handle) as second:
            pass

        assert first is not second
        assert fake_kms.create_client.call_count == 2
        assert not first.is_loaded
        assert not second.is_loaded

    @pytest.mark.asyncio
    async def test_explicit_keys_client_closed_on_error(self, fake_kms):
        config = KMSServiceConfig("eu-central-1", _explicit())
        handle = config.resolve_credentials(MessageExecutionContext(env={}))

        with pytest.raises(RuntimeError):
            async with config.acquire_client(handle) as client:
                raise RuntimeError("boom")

        assert not client.is_loaded

    @pytest.mark.asyncio
    async def test_explicit_keys_require_resolved_credentials(self, fake_kms):
        config = KMSServiceConfig("eu-central-1", _explicit())
        with pytest.raises(ClientInitError, match="no credentials were resolved"):
            async with config.acquire_client(None):
                pass
        fake_kms.create_client.assert_not_called()

    @pytest.mark.asyncio
    async def test_close(self, fake_kms):
        config = KMSServiceConfig("eu-central-1")
        await config.close()  # never built

        config = KMSServiceConfig("eu-central-1")
        async with config.acquire_client():
            pass
        await config.close()
        await config.close()

        assert config.is_closed
        assert fake_kms.closed
        with pytest.raises(ClientInitError, match="has been closed"):
            async with config.acquire_client():
                pass


class TestFromNodeConfig:
    def test_use_iam_role(self):
        config = KMSServiceConfig.from_node_config(
            {"region": "us-east-1", "useIAMRole": "true"},
            credentials={"accessKeyId": "ignored"},
        )
        assert config.uses_ambient_role
        assert config.region == "us-east-1"

    @pytest.mark.parametrize("flag", [True, "true", 1])
    def test_use_iam_role_markers(self, flag):
        config = KMSServiceConfig.from_node_config({"useIAMRole": flag}, env={})
        assert config.uses_ambient_role

    @pytest.mark.parametrize("flag", [False, "false", "yes", 0, 2, None, "1"])
    def test_other_flags_use_explicit_keys(self, flag):
        config = KMSServiceConfig.from_node_config(
            {"useIAMRole": flag},
            credentials={"accessKeyId": "a", "secretAccessKey": "b"},
            env={},
        )
        assert isinstance(config.auth_mode, ExplicitKeys)

    def test_default_region_from_env(self):
        config = KMSServiceConfig.from_node_config(
            {"useIAMRole": True}, env={"AWS_REGION": "ap-south-1"}
        )
        assert config.region == "ap-south-1"

    def test_default_region_fallback(self):
        config = KMSServiceConfig.from_node_config({"useIAMRole": True}, env={})
        assert config.region == "eu-central-1"

    @given(data=explicit_keys_config())
    def test_literal_credentials_come_from_credentials_store(self, data):
        config = KMSServiceConfig.from_node_config(data["config"], data["credentials"])
        handle = config.resolve_credentials(MessageExecutionContext(env={}))

        assert handle.get(ACCESS_KEY_ID) == data["credentials"]["accessKeyId"]
        assert handle.get(SECRET_ACCESS_KEY) == data["credentials"]["secretAccessKey"]
        assert handle.get(SESSION_TOKEN) is None

    def test_context_credentials(self):
        config = KMSServiceConfig.from_node_config(
            {
                "region": "eu-central-1",
                "accessKeyIdType": "env",
                "accessKeyIdContext": "MY_KEY",
                "secretAccessKeyType": "global",
                "secretAccessKeyContext": "aws.secret",
                "sessionTokenType": "msg",
                "sessionTokenContext": "payload.token",
            }
        )
        ctx = MessageExecutionContext(
            message={"payload": {"token": "tok"}},
            global_store=DictContextStore({"aws": {"secret": "shhh"}}),
            env={"MY_KEY": "AKIA..."},
        )

        handle = config.resolve_credentials(ctx)

        assert handle.get(ACCESS_KEY_ID) == "AKIA..."
        assert handle.get(SECRET_ACCESS_KEY) == "shhh"
        assert handle.get(SESSION_TOKEN) == "tok"

    def test_unknown_source_type(self):
        with pytest.raises(ClientInitError, match="Unknown credential source kind"):
            KMSServiceConfig.from_node_config(
                {"accessKeyIdType": "vault", "accessKeyIdContext": "x"}, env={}
            )

    def test_invalid_region(self):
        with pytest.raises(ClientInitError, match="Invalid AWS region"):
            KMSServiceConfig.from_node_config({"region": "nowhere-1", "useIAMRole": True})
