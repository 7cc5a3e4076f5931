import json
import logging
import os

import requests
from requests_toolbelt import MultipartEncoder

from errors import FileNotFound, MissingConfiguration, MissingCredentials, UploadFailed
from models import PinnedContent

logger = logging.getLogger(__name__)

PINATA_API_URL = 'https://api.pinata.cloud'
PIN_FILE_PATH = '/pinning/pinFileToIPFS'
PIN_JSON_PATH = '/pinning/pinJSONToIPFS'


class ContentPinner:
    """
    Upload files to IPFS through Pinata and hand back a gateway URL.

    The settings guards (credentials, gateway URL) and then the file check
    all run before any request is made. File bodies are streamed from disk.
    """
    def __init__(self, settings, session=None, api_url=PINATA_API_URL):
        self.settings = settings
        self.api_key = settings.pinata_api_key
        self.api_secret = settings.pinata_api_secret
        self.gateway_url = settings.pinata_gateway_url
        self.timeout = settings.pinata_timeout
        self.api_url = api_url
        self.session = session or requests.Session()

    def _headers(self, content_type=None):
        headers = {
            'pinata_api_key': self.api_key,
            'pinata_secret_api_key': self.api_secret,
        }
        if content_type:
            headers['Content-Type'] = content_type
        return headers

    def _check_settings(self):
        self.settings.require(MissingCredentials, 'pinata_api_key', 'pinata_api_secret')
        self.settings.require(MissingConfiguration, 'pinata_gateway_url')

    def _post(self, path, content_type=None, **kwargs):
        try:
            resp = self.session.post(self.api_url + path, headers=self._headers(content_type),
                                     timeout=self.timeout, **kwargs)
            resp.raise_for_status()
            return resp.json()['IpfsHash']
        except (requests.RequestException, ValueError, KeyError) as e:
            logger.error(f'Pinata upload failed: {str(e)}')
            raise UploadFailed('Upload to IPFS failed', cause=e) from e

    def pin_file(self, file_path):
        self._check_settings()

        if not os.path.isfile(file_path) or not os.access(file_path, os.R_OK):
            raise FileNotFound(file_path)

        name = os.path.basename(file_path)

        with open(file_path, 'rb') as f:
            body = MultipartEncoder(fields={
                'file': (name, f, 'application/octet-stream'),
                'pinataMetadata': json.dumps({'name': name}),
                'pinataOptions': json.dumps({'cidVersion': 0}),
            })
            cid = self._post(PIN_FILE_PATH, content_type=body.content_type, data=body)

        logger.info(f'File uploaded to IPFS, CID: {cid}')
        return PinnedContent(local_path=file_path, cid=cid, gateway_url=self.gateway_url)

    def upload_to_ipfs(self, file_path):
        """
        Pin `file_path` and return `gateway_url + CID`.
        """
        return self.pin_file(file_path).url

    def pin_json(self, content, name):
        self._check_settings()

        payload = {
            'pinataContent': content,
            'pinataMetadata': {'name': name},
            'pinataOptions': {'cidVersion': 0},
        }
        cid = self._post(PIN_JSON_PATH, json=payload)

        logger.info(f'JSON document {name} pinned, CID: {cid}')
        return PinnedContent(local_path=name, cid=cid, gateway_url=self.gateway_url)
