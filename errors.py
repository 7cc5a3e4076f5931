"""
Errors raised by the NFTree workflow and its clients.
"""


class NFTreeError(Exception):
    pass


class ConfigurationError(NFTreeError):
    def __init__(self, msg, missing=()):
        self.missing = tuple(missing)
        super().__init__(msg)


class MissingConfiguration(ConfigurationError):
    pass


class MissingCredentials(ConfigurationError):
    pass


class MissingRecipient(ConfigurationError):
    pass


class NotFoundError(NFTreeError):
    pass


class FileNotFound(NotFoundError):
    def __init__(self, path):
        self.path = str(path)
        super().__init__(f'File not found: {self.path}')


class TokenNotFound(NotFoundError):
    def __init__(self, token_id):
        self.token_id = token_id
        super().__init__(f'Token {token_id} has not been minted')


class AuthorizationError(NFTreeError):
    pass


class StepFailed(NFTreeError):
    """
    A lower-layer failure wrapped for one workflow step.
    The original exception is kept on `cause` and chained with `raise ... from`.
    """
    def __init__(self, msg, cause=None):
        self.cause = cause
        if cause is not None:
            msg = f'{msg}: {cause}'
        super().__init__(msg)


class AttestationFailed(StepFailed):
    pass


class UploadFailed(StepFailed):
    pass


class MintFailed(StepFailed):
    pass
