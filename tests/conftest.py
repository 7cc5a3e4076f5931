import pytest

from chain import Signer
from settings import Settings

TEST_KEY = '0x' + '4c' * 32
EAS_ADDRESS = '0xC2679fBD37d54388Ce493F1DB75320D236e1815e'
NFTREE_ADDRESS = '0x1E8461598caf86db994a0395A9389716e99f6d87'
RECIPIENT = '0xe3Bf624f20C5a1991B7185eAcA4c30da3C831698'
SCHEMA_UID = '0x' + '12' * 32
GATEWAY = 'https://gateway.pinata.cloud/ipfs/'


@pytest.fixture
def signer():
    return Signer(TEST_KEY)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        rpc_url='http://127.0.0.1:8545',
        private_key=TEST_KEY,
        eas_contract_address=EAS_ADDRESS,
        schema_uid=SCHEMA_UID,
        attestation_recipient=RECIPIENT,
        contract_address=NFTREE_ADDRESS,
        pinata_api_key='key',
        pinata_api_secret='secret',
        pinata_gateway_url=GATEWAY,
        recipient_address=RECIPIENT,
        metadata_file=str(tmp_path / 'metadataNFTree'),
        attestation_file=str(tmp_path / 'attestation.json'),
    )


@pytest.fixture
def receipt():
    return {
        'transactionHash': b'\x01' * 32,
        'blockNumber': 42,
        'gasUsed': 21000,
        'status': 1,
    }
