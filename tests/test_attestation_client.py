from unittest.mock import MagicMock

import pytest
from web3 import Web3

import attestation_client
from attestation_client import AttestationClient, decode_fields, encode_fields
from conftest import RECIPIENT, SCHEMA_UID
from errors import AttestationFailed, MissingConfiguration
from models import AttestationRecord, NFTREE_FIELD_TYPES, SAMPLE_VALUES
from settings import Settings

UID = b'\xab' * 32


@pytest.fixture
def client(settings, signer):
    return AttestationClient(MagicMock(), signer, settings)


@pytest.fixture
def sent(monkeypatch, receipt):
    # capture what would go on chain
    calls = []

    def fake_send(web3, signer, fn_call, receipt_timeout=120):
        calls.append(fn_call)
        return receipt

    monkeypatch.setattr(attestation_client, 'send_transaction', fake_send)
    return calls


def test_sample_values_round_trip():
    data = encode_fields(NFTREE_FIELD_TYPES, SAMPLE_VALUES)
    assert decode_fields(NFTREE_FIELD_TYPES, data) == SAMPLE_VALUES


def test_round_trip_checksummed_address(signer):
    values = (5, signer.address, 'Ipe', [], 'Recife', '-8.05,-34.9', 0, 2**255)
    data = encode_fields(NFTREE_FIELD_TYPES, values)
    assert decode_fields(NFTREE_FIELD_TYPES, data) == values


def test_encode_wrong_field_count():
    with pytest.raises(ValueError):
        encode_fields(NFTREE_FIELD_TYPES, SAMPLE_VALUES[:-1])


def test_missing_registry_settings(signer):
    with pytest.raises(MissingConfiguration) as ei:
        AttestationClient(MagicMock(), signer, Settings())
    assert ei.value.missing == ('EAS_CONTRACT_ADDRESS', 'SCHEMA_UID')


def test_create_attestation(client, sent):
    client.contract.events.Attested.return_value.process_receipt.return_value = [
        {'args': {'uid': UID}},
    ]

    uid = client.create_attestation()

    assert uid == '0x' + 'ab' * 32
    assert len(sent) == 1

    (request,), _ = client.contract.functions.attest.call_args
    schema, (recipient, expiration, revocable, ref_uid, data, value) = request
    assert schema == bytes.fromhex(SCHEMA_UID[2:])
    assert recipient == Web3.to_checksum_address(RECIPIENT)
    assert expiration == 0
    assert revocable is False
    assert ref_uid == b'\x00' * 32
    assert value == 0
    # the fields go out exactly as given
    assert decode_fields(NFTREE_FIELD_TYPES, data) == SAMPLE_VALUES


def test_create_attestation_custom_record(client, sent):
    client.contract.events.Attested.return_value.process_receipt.return_value = [
        {'args': {'uid': UID}},
    ]
    record = AttestationRecord(schema_uid=SCHEMA_UID, recipient=RECIPIENT, values=SAMPLE_VALUES,
                               revocable=True, expiration=1900000000)

    client.create_attestation(record)

    (request,), _ = client.contract.functions.attest.call_args
    assert request[1][1] == 1900000000
    assert request[1][2] is True


def test_encoding_mismatch_is_wrapped(client, sent):
    record = AttestationRecord(schema_uid=SCHEMA_UID, recipient=RECIPIENT, values=(1, 2))

    with pytest.raises(AttestationFailed) as ei:
        client.create_attestation(record)

    assert isinstance(ei.value.cause, ValueError)
    assert ei.value.__cause__ is ei.value.cause
    assert sent == []


def test_transaction_failure_is_wrapped(client, monkeypatch):
    boom = ConnectionError('node unreachable')

    def fake_send(*args, **kws):
        raise boom

    monkeypatch.setattr(attestation_client, 'send_transaction', fake_send)

    with pytest.raises(AttestationFailed) as ei:
        client.create_attestation()
    assert ei.value.cause is boom


def test_missing_event(client, sent):
    client.contract.events.Attested.return_value.process_receipt.return_value = []

    with pytest.raises(AttestationFailed):
        client.create_attestation()


def test_get_attestation(client):
    data = encode_fields(NFTREE_FIELD_TYPES, SAMPLE_VALUES)
    client.contract.functions.getAttestation.return_value.call.return_value = (
        UID, bytes.fromhex(SCHEMA_UID[2:]), 1700000000, 0, 0, b'\x00' * 32,
        RECIPIENT, RECIPIENT, False, data,
    )

    att = client.get_attestation('0x' + 'ab' * 32)

    assert att['uid'] == '0x' + 'ab' * 32
    assert att['schema'] == SCHEMA_UID
    assert att['values'] == SAMPLE_VALUES


def test_get_attestation_unknown(client):
    client.contract.functions.getAttestation.return_value.call.return_value = (
        b'\x00' * 32, b'\x00' * 32, 0, 0, 0, b'\x00' * 32, RECIPIENT, RECIPIENT, False, b'',
    )
    assert client.get_attestation('0x' + '00' * 32) is None
