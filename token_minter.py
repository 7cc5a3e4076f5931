import logging

from web3 import Web3
from web3.exceptions import ContractLogicError

from chain import Signer, connect, send_transaction
from errors import MintFailed, MissingConfiguration, TokenNotFound
from models import MintRequest, ReceiptSummary

logger = logging.getLogger(__name__)

# NFTree ERC-1155 extension (only the functions this client uses)
NFTreeABI = [
    {
        "inputs": [
            {"internalType": "address", "name": "account", "type": "address"},
            {"internalType": "uint256", "name": "id", "type": "uint256"},
            {"internalType": "uint256", "name": "amount", "type": "uint256"},
            {"internalType": "string", "name": "tokenURI", "type": "string"}
        ],
        "name": "mint",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [
            {"internalType": "uint256", "name": "tokenId", "type": "uint256"},
            {"internalType": "string", "name": "newURI", "type": "string"}
        ],
        "name": "updateTokenMetadata",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [{"internalType": "uint256", "name": "tokenId", "type": "uint256"}],
        "name": "getTokenMetadata",
        "outputs": [{"internalType": "string", "name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"internalType": "uint256", "name": "tokenId", "type": "uint256"}],
        "name": "getMetadataHistory",
        "outputs": [{"internalType": "string[]", "name": "", "type": "string[]"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"internalType": "uint256", "name": "tokenId", "type": "uint256"}],
        "name": "uri",
        "outputs": [{"internalType": "string", "name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"internalType": "string", "name": "newBaseURI", "type": "string"}],
        "name": "updateBaseURI",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    }
]

REQUIRED = ('rpc_url', 'contract_address', 'private_key')


class TokenMinter:
    """
    Mints NFTree tokens through the deployed contract.

    Connection settings are checked here, when the minter is built, so a
    misconfigured run stops before its first step.
    """
    def __init__(self, settings, web3=None, signer=None):
        settings.require(MissingConfiguration, *REQUIRED)

        if web3 is None:
            web3 = connect(settings.rpc_url, timeout=settings.rpc_timeout)
        if signer is None:
            signer = Signer(settings.private_key)

        self.web3 = web3
        self.signer = signer
        self.receipt_timeout = settings.receipt_timeout
        self.contract = web3.eth.contract(
            address=Web3.to_checksum_address(settings.contract_address),
            abi=NFTreeABI,
        )

    def _transact(self, what, build_call):
        # the call is built inside the try so argument errors are wrapped too
        try:
            return send_transaction(self.web3, self.signer, build_call(),
                                    receipt_timeout=self.receipt_timeout)
        except Exception as e:
            logger.error(f'Error during {what}: {str(e)}')
            raise MintFailed(f'{what} failed', cause=e) from e

    def _read(self, what, token_id, build_call):
        try:
            return build_call().call()
        except ContractLogicError as e:
            raise TokenNotFound(token_id) from e
        except Exception as e:
            logger.error(f'Error during {what}: {str(e)}')
            raise MintFailed(f'{what} failed', cause=e) from e

    def mint_token(self, recipient, token_id, amount, metadata_uri):
        req = MintRequest(recipient, token_id, amount, metadata_uri)
        logger.info(f'Minting {req.amount} of token {req.token_id} to {req.recipient}')

        receipt = self._transact('Mint', lambda: self.contract.functions.mint(
            Web3.to_checksum_address(req.recipient), req.token_id, req.amount, req.metadata_uri))
        logger.info(f'Mint transaction confirmed: {ReceiptSummary.from_receipt(receipt)}')
        return receipt

    def update_token_metadata(self, token_id, metadata_uri):
        receipt = self._transact('Metadata update', lambda: self.contract.functions.updateTokenMetadata(
            token_id, metadata_uri))
        logger.info(f'Metadata of token {token_id} now {metadata_uri}')
        return receipt

    def update_base_uri(self, base_uri):
        return self._transact('Base URI update', lambda: self.contract.functions.updateBaseURI(base_uri))

    def get_token_metadata(self, token_id):
        return self._read('Metadata read', token_id,
                          lambda: self.contract.functions.getTokenMetadata(token_id))

    def get_metadata_history(self, token_id):
        return list(self._read('History read', token_id,
                               lambda: self.contract.functions.getMetadataHistory(token_id)))

    def uri(self, token_id):
        """
        Resolve the metadata URI of a token class: its own current URI once
        minted, otherwise the contract's global base URI.
        """
        try:
            current = self.get_token_metadata(token_id)
        except TokenNotFound:
            current = None
        if current:
            return current
        return self._read('Base URI read', token_id, lambda: self.contract.functions.uri(token_id))
