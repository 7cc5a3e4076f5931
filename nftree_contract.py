"""
Model of the NFTree ERC-1155 extension: a metadata pointer per token class,
with its full history, plus a global base URI.

URI resolution (`uri`) is two-tier: a minted token class resolves to its own
current metadata URI; anything else falls back to the global base URI.

Balances, transfers and burns belong to the ERC-1155 base contract and are
not modelled here.
"""
from dataclasses import dataclass, field
from typing import List, Protocol

from errors import AuthorizationError, TokenNotFound


class OwnerPolicy(Protocol):
    def check(self, caller: str) -> None:
        """Raise AuthorizationError unless `caller` may mutate the contract."""


class SingleOwnerPolicy:
    def __init__(self, owner: str):
        self.owner = owner

    def check(self, caller: str) -> None:
        if caller is None or caller.lower() != self.owner.lower():
            raise AuthorizationError(f'{caller} is not the contract owner')


@dataclass
class TokenMetadataPointer:
    current_uri: str = ''
    history: List[str] = field(default_factory=list)

    def advance(self, uri: str) -> None:
        self.current_uri = uri
        self.history.append(uri)


def _check_uri(uri):
    if not uri:
        raise ValueError('Token URI must not be empty')


class NFTreeContract:
    def __init__(self, policy: OwnerPolicy, base_uri: str = ''):
        self.policy = policy
        self.base_uri = base_uri
        self._pointers = {}

    def _pointer(self, token_id) -> TokenMetadataPointer:
        ptr = self._pointers.get(token_id)
        if ptr is None or not ptr.history:
            raise TokenNotFound(token_id)
        return ptr

    def is_minted(self, token_id) -> bool:
        return token_id in self._pointers

    def mint(self, caller: str, to: str, token_id: int, amount: int, uri: str) -> None:
        self.policy.check(caller)
        _check_uri(uri)
        if token_id < 0 or amount < 0:
            raise ValueError('token id and amount must not be negative')

        self._pointers.setdefault(token_id, TokenMetadataPointer()).advance(uri)

    def update_token_metadata(self, caller: str, token_id: int, uri: str) -> None:
        self.policy.check(caller)
        ptr = self._pointer(token_id)
        _check_uri(uri)
        ptr.advance(uri)

    def get_token_metadata(self, token_id: int) -> str:
        return self._pointer(token_id).current_uri

    def get_metadata_history(self, token_id: int) -> List[str]:
        return list(self._pointer(token_id).history)

    def update_base_uri(self, caller: str, uri: str) -> None:
        self.policy.check(caller)
        self.base_uri = uri

    def uri(self, token_id: int) -> str:
        ptr = self._pointers.get(token_id)
        if ptr is not None and ptr.current_uri:
            return ptr.current_uri
        return self.base_uri
