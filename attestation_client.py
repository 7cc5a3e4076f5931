"""
Client for the Ethereum Attestation Service (EAS) registry.

One call, one transaction: `create_attestation` encodes the schema fields,
sends `attest(...)` signed by the shared signer, waits for the receipt and
returns the UID the registry assigned (read from the `Attested` event).
"""
import logging

from eth_abi import encode, decode
from web3 import Web3
from web3.logs import DISCARD

from chain import send_transaction
from errors import AttestationFailed, MissingConfiguration
from models import AttestationRecord, SAMPLE_VALUES

logger = logging.getLogger(__name__)

ZERO_UID = b'\x00' * 32

EAS_ABI = [
    {
        "inputs": [
            {
                "components": [
                    {"internalType": "bytes32", "name": "schema", "type": "bytes32"},
                    {
                        "components": [
                            {"internalType": "address", "name": "recipient", "type": "address"},
                            {"internalType": "uint64", "name": "expirationTime", "type": "uint64"},
                            {"internalType": "bool", "name": "revocable", "type": "bool"},
                            {"internalType": "bytes32", "name": "refUID", "type": "bytes32"},
                            {"internalType": "bytes", "name": "data", "type": "bytes"},
                            {"internalType": "uint256", "name": "value", "type": "uint256"}
                        ],
                        "internalType": "struct AttestationRequestData",
                        "name": "data",
                        "type": "tuple"
                    }
                ],
                "internalType": "struct AttestationRequest",
                "name": "request",
                "type": "tuple"
            }
        ],
        "name": "attest",
        "outputs": [{"internalType": "bytes32", "name": "", "type": "bytes32"}],
        "stateMutability": "payable",
        "type": "function"
    },
    {
        "inputs": [{"internalType": "bytes32", "name": "uid", "type": "bytes32"}],
        "name": "getAttestation",
        "outputs": [
            {
                "components": [
                    {"internalType": "bytes32", "name": "uid", "type": "bytes32"},
                    {"internalType": "bytes32", "name": "schema", "type": "bytes32"},
                    {"internalType": "uint64", "name": "time", "type": "uint64"},
                    {"internalType": "uint64", "name": "expirationTime", "type": "uint64"},
                    {"internalType": "uint64", "name": "revocationTime", "type": "uint64"},
                    {"internalType": "bytes32", "name": "refUID", "type": "bytes32"},
                    {"internalType": "address", "name": "recipient", "type": "address"},
                    {"internalType": "address", "name": "attester", "type": "address"},
                    {"internalType": "bool", "name": "revocable", "type": "bool"},
                    {"internalType": "bytes", "name": "data", "type": "bytes"}
                ],
                "internalType": "struct Attestation",
                "name": "",
                "type": "tuple"
            }
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "address", "name": "recipient", "type": "address"},
            {"indexed": True, "internalType": "address", "name": "attester", "type": "address"},
            {"indexed": False, "internalType": "bytes32", "name": "uid", "type": "bytes32"},
            {"indexed": True, "internalType": "bytes32", "name": "schemaUID", "type": "bytes32"}
        ],
        "name": "Attested",
        "type": "event"
    }
]


def encode_fields(field_types, values):
    """ABI-encode schema values, in schema order."""
    if len(values) != len(field_types):
        raise ValueError(f'Schema has {len(field_types)} fields, got {len(values)} values')
    return encode(list(field_types), list(values))


def _normalize(typ, value):
    if typ.endswith('[]'):
        return [_normalize(typ[:-2], v) for v in value]
    if typ == 'address':
        return Web3.to_checksum_address(value)
    return value


def decode_fields(field_types, data):
    """
    Inverse of encode_fields. Addresses come back checksummed and arrays as
    lists, so values built the usual way compare equal after a round trip.
    """
    decoded = decode(list(field_types), bytes(data))
    return tuple(_normalize(t, v) for t, v in zip(field_types, decoded))


class AttestationClient:
    def __init__(self, web3, signer, settings, values=SAMPLE_VALUES):
        settings.require(MissingConfiguration, 'eas_contract_address', 'schema_uid')

        self.web3 = web3
        self.signer = signer
        self.settings = settings
        self.values = tuple(values)
        self.contract = web3.eth.contract(
            address=Web3.to_checksum_address(settings.eas_contract_address),
            abi=EAS_ABI,
        )

    def default_record(self):
        return AttestationRecord(
            schema_uid=self.settings.schema_uid,
            recipient=self.settings.attestation_recipient,
            values=self.values,
        )

    def create_attestation(self, record=None):
        record = record or self.default_record()

        try:
            data = encode_fields(record.field_types, record.values)
            request = (
                Web3.to_bytes(hexstr=record.schema_uid),
                (
                    Web3.to_checksum_address(record.recipient),
                    record.expiration_time,
                    record.revocable,
                    ZERO_UID,
                    data,
                    0,
                ),
            )

            logger.info(f'Submitting attestation for schema {record.schema_uid}')
            receipt = send_transaction(self.web3, self.signer,
                                       self.contract.functions.attest(request),
                                       receipt_timeout=self.settings.receipt_timeout)

            events = self.contract.events.Attested().process_receipt(receipt, errors=DISCARD)
            if not events:
                raise RuntimeError('No Attested event in transaction receipt')

            uid = Web3.to_hex(events[0]['args']['uid'])
        except Exception as e:
            logger.error(f'Error creating attestation: {str(e)}')
            raise AttestationFailed('Attestation failed', cause=e) from e

        logger.info(f'Attestation created with UID: {uid}')
        return uid

    def get_attestation(self, uid):
        """
        Read an attestation back from the registry, with its fields decoded
        against the default NFTree schema.
        """
        att = self.contract.functions.getAttestation(Web3.to_bytes(hexstr=uid)).call()
        if att[0] == ZERO_UID:
            return None

        record = self.default_record()
        return {
            'uid': Web3.to_hex(att[0]),
            'schema': Web3.to_hex(att[1]),
            'time': att[2],
            'expirationTime': att[3],
            'revocationTime': att[4],
            'recipient': att[6],
            'attester': att[7],
            'revocable': att[8],
            'values': decode_fields(record.field_types, att[9]),
        }
