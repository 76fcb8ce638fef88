"""Unit tests for OneTimeTokenFlow."""

import asyncio

import pytest

from clockwork_auth.application.exceptions import InvalidCodeError, InvalidOrExpiredTokenError
from clockwork_auth.application.services.one_time_token import OneTimeTokenFlow
from clockwork_auth.infrastructure.repositories.session_store_memory import InMemorySessionStore

pytestmark = pytest.mark.unit


@pytest.fixture
def reset_flow(token_signer, fake_session_store) -> OneTimeTokenFlow:
    return OneTimeTokenFlow(
        token_signer, fake_session_store, token_type="password_reset", ttl_seconds=3600, key_prefix="reset"
    )


@pytest.fixture
def challenge_flow(token_signer, fake_session_store) -> OneTimeTokenFlow:
    return OneTimeTokenFlow(
        token_signer,
        fake_session_store,
        token_type="2fa_challenge",
        ttl_seconds=300,
        key_prefix="2fa_challenge",
        keyed_by="subject",
        error=InvalidCodeError,
    )


# === TOKEN-KEYED FLOW ===


@pytest.mark.asyncio
async def test_issue_writes_mirror(reset_flow, fake_session_store):
    token = await reset_flow.issue(1, email="test@example.com")

    assert fake_session_store.values[f"reset:{token}"] == "1"
    assert fake_session_store.ttls[f"reset:{token}"] == 3600


@pytest.mark.asyncio
async def test_verify_does_not_consume(reset_flow):
    token = await reset_flow.issue(1, email="test@example.com")

    claims = await reset_flow.verify(token)
    await reset_flow.verify(token)

    assert claims.subject_id == 1
    assert claims.extra["email"] == "test@example.com"


@pytest.mark.asyncio
async def test_consume_is_single_use(reset_flow):
    # Arrange
    token = await reset_flow.issue(1)

    # Act
    await reset_flow.consume(token)

    # Assert
    with pytest.raises(InvalidOrExpiredTokenError):
        await reset_flow.consume(token)
    with pytest.raises(InvalidOrExpiredTokenError):
        await reset_flow.verify(token)


@pytest.mark.asyncio
async def test_tokens_per_subject_are_independent(reset_flow):
    first = await reset_flow.issue(1)
    second = await reset_flow.issue(1)

    await reset_flow.consume(first)

    assert (await reset_flow.verify(second)).subject_id == 1


@pytest.mark.asyncio
async def test_missing_mirror_rejects_token(reset_flow, fake_session_store):
    token = await reset_flow.issue(1)
    fake_session_store.expire(f"reset:{token}")

    with pytest.raises(InvalidOrExpiredTokenError):
        await reset_flow.verify(token)


@pytest.mark.asyncio
async def test_token_of_other_kind_rejected(reset_flow, token_signer):
    token = token_signer.encode(1, "access", 60)

    with pytest.raises(InvalidOrExpiredTokenError):
        await reset_flow.verify(token)


@pytest.mark.asyncio
async def test_concurrent_consumers_exactly_one_wins(token_signer):
    # Arrange
    flow = OneTimeTokenFlow(
        token_signer, InMemorySessionStore(), token_type="password_reset", ttl_seconds=60, key_prefix="reset"
    )
    token = await flow.issue(1)

    # Act
    results = await asyncio.gather(*(flow.consume(token) for _ in range(5)), return_exceptions=True)

    # Assert
    successes = [r for r in results if not isinstance(r, Exception)]
    failures = [r for r in results if isinstance(r, InvalidOrExpiredTokenError)]
    assert len(successes) == 1
    assert len(failures) == 4


# === SUBJECT-KEYED FLOW ===


@pytest.mark.asyncio
async def test_reissue_supersedes_previous(challenge_flow):
    first = await challenge_flow.issue(1)
    second = await challenge_flow.issue(1)

    with pytest.raises(InvalidCodeError):
        await challenge_flow.verify(first)
    assert (await challenge_flow.consume(second)).subject_id == 1


@pytest.mark.asyncio
async def test_load_token_and_discard(challenge_flow):
    token = await challenge_flow.issue(1)

    assert await challenge_flow.load_token(1) == token

    await challenge_flow.discard(1)

    assert await challenge_flow.load_token(1) is None
    with pytest.raises(InvalidCodeError):
        await challenge_flow.verify(token)


@pytest.mark.asyncio
async def test_same_second_reissue_yields_distinct_tokens(challenge_flow, token_signer):
    # Arrange
    first = await challenge_flow.issue(1)

    # Act
    second = await challenge_flow.issue(1)

    # Assert
    assert first != second
    first_claims = token_signer.decode(first, expected_type="2fa_challenge")
    second_claims = token_signer.decode(second, expected_type="2fa_challenge")
    assert first_claims.token_id
    assert first_claims.token_id != second_claims.token_id
    with pytest.raises(InvalidCodeError):
        await challenge_flow.consume(first)
    assert (await challenge_flow.consume(second)).subject_id == 1


@pytest.mark.asyncio
async def test_subject_operations_need_subject_keyed_flow(reset_flow):
    with pytest.raises(TypeError):
        await reset_flow.load_token(1)
    with pytest.raises(TypeError):
        await reset_flow.discard(1)
