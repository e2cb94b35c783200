"""End-to-end vault flows through the service layer."""

import asyncio
from datetime import timedelta

from medvault.core.modules.otp import service as otp_service
from medvault.errors import InvalidOrExpiredCodeError, VaultLockedError

ECG = b"%PDF-1.7 12-lead ECG"


async def test_owner_unlocks_vault_and_manages_a_document(core, clock, notifier, owner_id, monkeypatch):
    monkeypatch.setattr(otp_service, "generate_otp_code", lambda exclude=(): "482913")

    receipt = (await core.services.otp.issue(owner_id, "u1@example.com")).unwrap()
    assert notifier.sent == [("u1@example.com", "482913")]
    assert receipt.expires_at == clock.current + timedelta(minutes=10)

    clock.advance(minutes=2)
    access = (await core.services.otp.verify(owner_id, "482913")).unwrap()
    session_ref = access.session_ref
    documents = core.services.document

    assert (await documents.list_documents(owner_id, session_ref)).unwrap() == []

    created = (await documents.create_document(owner_id, session_ref, "ecg.pdf", "application/pdf", ECG)).unwrap()
    listed = (await documents.list_documents(owner_id, session_ref)).unwrap()
    assert [(d.id, d.name) for d in listed] == [(created.id, "ecg.pdf")]

    (await documents.delete_document(owner_id, session_ref, created.id)).unwrap()
    assert (await documents.list_documents(owner_id, session_ref)).unwrap() == []


async def test_vault_locks_ten_minutes_after_issue(core, clock, notifier, owner_id):
    (await core.services.otp.issue(owner_id, "u1@example.com")).unwrap()
    session_ref = (await core.services.otp.verify(owner_id, notifier.last_code)).unwrap().session_ref

    clock.advance(minutes=10)

    result = await core.services.document.list_documents(owner_id, session_ref)
    assert isinstance(result.error, VaultLockedError)
    retry = await core.services.otp.verify(owner_id, notifier.last_code)
    assert isinstance(retry.error, InvalidOrExpiredCodeError)


async def test_second_request_within_seconds_can_be_verified(core, clock, notifier, owner_id):
    (await core.services.otp.issue(owner_id, "u1@example.com")).unwrap()
    clock.advance(seconds=4)
    (await core.services.otp.issue(owner_id, "u1@example.com")).unwrap()
    first_code, second_code = (code for _, code in notifier.sent)

    access = (await core.services.otp.verify(owner_id, second_code)).unwrap()

    assert (await core.services.document.list_documents(owner_id, access.session_ref)).ok
    assert first_code != second_code


async def test_owners_never_see_each_others_vaults(core, notifier, owner_id, other_owner_id, unlock_vault, monkeypatch):
    codes = iter(["104729", "130363"])
    monkeypatch.setattr(otp_service, "generate_otp_code", lambda exclude=(): next(codes))
    my_ref = await unlock_vault(owner_id)
    (await core.services.document.create_document(owner_id, my_ref, "mri.pdf", None, ECG)).unwrap()

    (await core.services.otp.issue(other_owner_id, "other@example.com")).unwrap()
    their_code = notifier.last_code
    assert their_code == "130363"

    # The other owner's code does not open my vault, and my reference does not open theirs
    assert isinstance((await core.services.otp.verify(owner_id, their_code)).error, InvalidOrExpiredCodeError)
    assert isinstance(
        (await core.services.document.list_documents(other_owner_id, my_ref)).error, VaultLockedError
    )

    their_ref = (await core.services.otp.verify(other_owner_id, their_code)).unwrap().session_ref
    assert (await core.services.document.list_documents(other_owner_id, their_ref)).unwrap() == []


async def test_parallel_unlocks_of_different_owners(core, notifier, owner_id, other_owner_id):
    results = await asyncio.gather(
        core.services.otp.issue(owner_id, "a@example.com"),
        core.services.otp.issue(other_owner_id, "b@example.com"),
    )

    assert all(result.ok for result in results)
    assert {address for address, _ in notifier.sent} == {"a@example.com", "b@example.com"}
