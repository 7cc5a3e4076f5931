"""
Environment-driven configuration.

Every value comes from the process environment (a `.env` file is loaded by the
CLI before `Settings.from_env` runs). Nothing required gets a silent default:
each step calls `Settings.require` for the values it needs, which raises a
named ConfigurationError listing the missing variables.
"""
import os
from dataclasses import dataclass
from typing import Optional

from errors import ConfigurationError

ZERO_ADDRESS = '0x0000000000000000000000000000000000000000'

# attribute -> environment variable
ENV_NAMES = {
    'rpc_url': 'RPC_URL',
    'private_key': 'PRIVATE_KEY',
    'eas_contract_address': 'EAS_CONTRACT_ADDRESS',
    'schema_uid': 'SCHEMA_UID',
    'attestation_recipient': 'ATTESTATION_RECIPIENT',
    'contract_address': 'CONTRACT_ADDRESS',
    'pinata_api_key': 'PINATA_API_KEY',
    'pinata_api_secret': 'PINATA_API_SECRET',
    'pinata_gateway_url': 'PINATA_GATEWAY_URL',
    'recipient_address': 'RECIPIENT_ADDRESS',
    'token_id': 'TOKEN_ID',
    'mint_amount': 'MINT_AMOUNT',
    'metadata_file': 'METADATA_FILE',
    'attestation_file': 'ATTESTATION_FILE',
    'rpc_timeout': 'RPC_TIMEOUT',
    'pinata_timeout': 'PINATA_TIMEOUT',
    'receipt_timeout': 'RECEIPT_TIMEOUT',
    'log_level': 'LOG_LEVEL',
}

SECRETS = ('private_key', 'pinata_api_secret')


def _int_env(environ, name, default):
    raw = (environ.get(name) or '').strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f'{name} must be an integer, got {raw!r}', missing=(name,))
    if value < 0:
        raise ConfigurationError(f'{name} must not be negative, got {value}', missing=(name,))
    return value


@dataclass(frozen=True)
class Settings:
    rpc_url: Optional[str] = None
    private_key: Optional[str] = None
    eas_contract_address: Optional[str] = None
    schema_uid: Optional[str] = None
    attestation_recipient: str = ZERO_ADDRESS
    contract_address: Optional[str] = None
    pinata_api_key: Optional[str] = None
    pinata_api_secret: Optional[str] = None
    pinata_gateway_url: Optional[str] = None
    recipient_address: Optional[str] = None
    token_id: int = 2
    mint_amount: int = 1
    metadata_file: str = 'metadataNFTree'
    attestation_file: str = 'attestation.json'
    rpc_timeout: int = 30
    pinata_timeout: int = 60
    receipt_timeout: int = 120
    log_level: str = 'INFO'

    def __repr__(self):
        # never print the signing key or the pinning secret
        shown = []
        for k, v in self.__dict__.items():
            if k in SECRETS and v:
                v = '***'
            shown.append(f'{k}={v!r}')
        return f'Settings({", ".join(shown)})'

    @classmethod
    def from_env(cls, environ=None):
        environ = os.environ if environ is None else environ

        def text(attr, default=None):
            value = (environ.get(ENV_NAMES[attr]) or '').strip()
            return value or default

        return cls(
            rpc_url=text('rpc_url'),
            private_key=text('private_key'),
            eas_contract_address=text('eas_contract_address'),
            schema_uid=text('schema_uid'),
            attestation_recipient=text('attestation_recipient', ZERO_ADDRESS),
            contract_address=text('contract_address'),
            pinata_api_key=text('pinata_api_key'),
            pinata_api_secret=text('pinata_api_secret'),
            pinata_gateway_url=text('pinata_gateway_url'),
            recipient_address=text('recipient_address'),
            token_id=_int_env(environ, 'TOKEN_ID', 2),
            mint_amount=_int_env(environ, 'MINT_AMOUNT', 1),
            metadata_file=text('metadata_file', 'metadataNFTree'),
            attestation_file=text('attestation_file', 'attestation.json'),
            rpc_timeout=_int_env(environ, 'RPC_TIMEOUT', 30),
            pinata_timeout=_int_env(environ, 'PINATA_TIMEOUT', 60),
            receipt_timeout=_int_env(environ, 'RECEIPT_TIMEOUT', 120),
            log_level=text('log_level', 'INFO').upper(),
        )

    def missing(self, *attrs):
        return [ENV_NAMES[a] for a in attrs if not getattr(self, a)]

    def require(self, error_cls, *attrs):
        """
        Raise `error_cls` naming every environment variable behind `attrs`
        that is not set.
        """
        missing = self.missing(*attrs)
        if missing:
            raise error_cls(f'Missing required configuration: {", ".join(missing)}', missing=missing)
