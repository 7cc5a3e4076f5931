from dataclasses import dataclass
from typing import Optional

from settings import ZERO_ADDRESS

RECORD_NAME = 'AttestationUID'

# Field types of the NFTree attestation schema, in on-chain order:
#   uint256 treeId, address planter, string species, string[] photos,
#   string location, string coordinates, uint256 plantedAt, uint256 co2Grams
NFTREE_FIELD_TYPES = ('uint256', 'address', 'string', 'string[]', 'string', 'string', 'uint256', 'uint256')

SAMPLE_VALUES = (
    1,
    ZERO_ADDRESS,
    'Araucaria angustifolia',
    ['ipfs://QmSamplePhotoFront', 'ipfs://QmSamplePhotoCanopy'],
    'Curitiba, PR, Brazil',
    '-25.4284,-49.2733',
    1717200000,
    250000,
)


@dataclass(frozen=True)
class AttestationRecord:
    schema_uid: str
    recipient: str
    values: tuple
    field_types: tuple = NFTREE_FIELD_TYPES
    revocable: bool = False
    expiration: Optional[int] = None     # unix seconds, None = never

    @property
    def expiration_time(self):
        # the registry uses 0 for "no expiration"
        return self.expiration or 0


@dataclass(frozen=True)
class AttestationPointer:
    value: str
    name: str = RECORD_NAME

    def to_dict(self):
        return {'name': self.name, 'value': self.value}


@dataclass(frozen=True)
class PinnedContent:
    local_path: str
    cid: str
    gateway_url: str

    @property
    def url(self):
        # plain concatenation, the gateway base is expected to end with '/'
        return self.gateway_url + self.cid


@dataclass(frozen=True)
class MintRequest:
    recipient: str
    token_id: int
    amount: int
    metadata_uri: str


@dataclass(frozen=True)
class ReceiptSummary:
    tx_hash: str
    block_number: int
    gas_used: int
    status: int

    @classmethod
    def from_receipt(cls, receipt):
        tx_hash = receipt['transactionHash']
        if not isinstance(tx_hash, str):
            tx_hash = '0x' + bytes(tx_hash).hex()
        return cls(
            tx_hash=tx_hash,
            block_number=receipt.get('blockNumber'),
            gas_used=receipt.get('gasUsed'),
            status=receipt.get('status'),
        )

    def __str__(self):
        return f'tx={self.tx_hash} block={self.block_number} gas={self.gas_used} status={self.status}'


@dataclass
class WorkflowParams:
    """
    Everything the workflow used to hard-code, as one parameter set.

    Defaults: metadata_file='metadataNFTree', record_file='attestation.json',
    token_id=2, amount=1, attestation values = SAMPLE_VALUES.
    `recipient` has no default: the mint step refuses to run without it.
    """
    recipient: Optional[str] = None
    metadata_file: str = 'metadataNFTree'
    record_file: str = 'attestation.json'
    token_id: int = 2
    amount: int = 1
    attestation_values: tuple = SAMPLE_VALUES

    @classmethod
    def from_settings(cls, settings):
        return cls(
            recipient=settings.recipient_address,
            metadata_file=settings.metadata_file,
            record_file=settings.attestation_file,
            token_id=settings.token_id,
            amount=settings.mint_amount,
        )


@dataclass(frozen=True)
class WorkflowResult:
    uid: str
    url: str
    receipt: object
