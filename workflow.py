"""
The NFTree workflow: attest, record the UID, pin the metadata file, mint.

Four blocking steps in a fixed order. The first failure ends the run; steps
that already completed are not undone (an attestation stays on chain and a
pinned file stays pinned even if minting fails afterwards).
"""
import json
import logging
from typing import Protocol

from attestation_client import AttestationClient
from chain import Signer, connect
from content_pinner import ContentPinner
from errors import MissingConfiguration, MissingRecipient
from models import AttestationPointer, ReceiptSummary, WorkflowParams, WorkflowResult
from token_minter import REQUIRED as MINTER_SETTINGS, TokenMinter

logger = logging.getLogger(__name__)


class Attest(Protocol):
    def create_attestation(self) -> str: ...


class Pin(Protocol):
    def upload_to_ipfs(self, file_path: str) -> str: ...


class Mint(Protocol):
    def mint_token(self, recipient: str, token_id: int, amount: int, metadata_uri: str): ...


def save_attestation_record(path, uid):
    # overwrite, never append
    pointer = AttestationPointer(value=uid)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(pointer.to_dict(), f, indent=2)
    logger.info(f'Attestation saved to {path}')
    return pointer


class Workflow:
    def __init__(self, attester: Attest, pinner: Pin, minter: Mint, params: WorkflowParams):
        self.attester = attester
        self.pinner = pinner
        self.minter = minter
        self.params = params

    def run_workflow(self) -> WorkflowResult:
        params = self.params

        logger.info('Step 1: Creating attestation...')
        uid = self.attester.create_attestation()
        logger.info(f'Attestation created successfully. UID: {uid}')

        logger.info('Step 2: Saving attestation data to JSON file...')
        save_attestation_record(params.record_file, uid)

        logger.info('Step 3: Uploading metadata file to IPFS...')
        url = self.pinner.upload_to_ipfs(params.metadata_file)
        logger.info(f'File uploaded to IPFS successfully! URL: {url}')

        logger.info('Step 4: Minting ERC-1155 NFT...')
        if not params.recipient:
            raise MissingRecipient('RECIPIENT_ADDRESS is not configured', missing=['RECIPIENT_ADDRESS'])

        receipt = self.minter.mint_token(params.recipient, params.token_id, params.amount, url)
        logger.info(f'ERC-1155 NFT minted successfully! {ReceiptSummary.from_receipt(receipt)}')

        logger.info('Workflow completed successfully!')
        return WorkflowResult(uid=uid, url=url, receipt=receipt)


def build_workflow(settings, params=None):
    """
    Wire the real clients from settings. One Web3 connection and one signer
    serve both the attestation and the mint step.
    """
    params = params or WorkflowParams.from_settings(settings)

    settings.require(MissingConfiguration, *MINTER_SETTINGS)
    web3 = connect(settings.rpc_url, timeout=settings.rpc_timeout)
    signer = Signer(settings.private_key)

    minter = TokenMinter(settings, web3=web3, signer=signer)
    attester = AttestationClient(web3, signer, settings, values=params.attestation_values)
    pinner = ContentPinner(settings)

    return Workflow(attester, pinner, minter, params)
