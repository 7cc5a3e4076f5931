import logging

from eth_account import Account
from web3 import Web3

from errors import ConfigurationError

logger = logging.getLogger(__name__)


class TransactionReverted(RuntimeError):
    def __init__(self, tx_hash, receipt):
        self.tx_hash = tx_hash
        self.receipt = receipt
        super().__init__(f'Transaction {tx_hash} failed on chain')


class Signer:
    """
    The one signing account shared by every client in a run.
    The key is loaded once here and never shown in repr or logs.
    """
    def __init__(self, private_key):
        try:
            self._account = Account.from_key(private_key)
        except Exception:
            # the original message may echo the key
            raise ConfigurationError('PRIVATE_KEY is not a valid private key',
                                     missing=('PRIVATE_KEY',)) from None

    @property
    def address(self):
        return self._account.address

    @property
    def key(self):
        return self._account.key

    def __repr__(self):
        return f'<Signer {self.address}>'


def connect(rpc_url, timeout=30):
    """
    Open an HTTP provider. Request timeouts belong to the provider, callers
    never add their own.
    """
    return Web3(Web3.HTTPProvider(rpc_url, request_kwargs={'timeout': timeout}))


def send_transaction(web3, signer, fn_call, receipt_timeout=120):
    """
    Build, sign and send a contract function call, then block until it is
    mined. Returns the receipt, or raises TransactionReverted when the chain
    rejected it.
    """
    nonce = web3.eth.get_transaction_count(signer.address, 'pending')

    tx = fn_call.build_transaction({
        'from': signer.address,
        'nonce': nonce,
        'chainId': web3.eth.chain_id,
    })

    signed_tx = web3.eth.account.sign_transaction(tx, signer.key)
    tx_hash = web3.eth.send_raw_transaction(signed_tx.raw_transaction)
    tx_hash_hex = Web3.to_hex(tx_hash)
    logger.info(f'Transaction sent with hash: {tx_hash_hex}')

    receipt = web3.eth.wait_for_transaction_receipt(tx_hash, timeout=receipt_timeout)
    if receipt['status'] != 1:
        raise TransactionReverted(tx_hash_hex, receipt)

    logger.info(f'Transaction confirmed in block {receipt["blockNumber"]}')
    return receipt
