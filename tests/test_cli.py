import json
import logging

from click.testing import CliRunner

import cli
from cli import main
from errors import UploadFailed
from models import PinnedContent

EMPTY_ENV = {name: None for name in (
    'RPC_URL', 'PRIVATE_KEY', 'EAS_CONTRACT_ADDRESS', 'SCHEMA_UID', 'CONTRACT_ADDRESS',
    'PINATA_API_KEY', 'PINATA_API_SECRET', 'PINATA_GATEWAY_URL', 'RECIPIENT_ADDRESS', 'TOKEN_ID',
    'LOG_LEVEL',
)}


def test_upload_without_credentials():
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(main, ['upload', 'metadataNFTree'], env=EMPTY_ENV)

    assert result.exit_code == 1
    assert 'PINATA_API_KEY' in result.output


def test_run_without_configuration_fails():
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(main, ['run'], env=EMPTY_ENV)

    assert result.exit_code == 1


def test_mint_without_recipient():
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(main, ['mint', 'ipfs://Qm123'], env=EMPTY_ENV)

    assert result.exit_code == 1
    assert 'RECIPIENT_ADDRESS' in result.output


def test_bad_token_id_setting():
    runner = CliRunner()
    env = dict(EMPTY_ENV, TOKEN_ID='two')
    with runner.isolated_filesystem():
        result = runner.invoke(main, ['upload'], env=env)

    assert result.exit_code == 1
    assert 'TOKEN_ID' in result.output


class FakeWorkflow:
    def __init__(self, error=None):
        self.error = error
        self.runs = 0

    def run_workflow(self):
        self.runs += 1
        if self.error:
            raise self.error


def test_run_success(monkeypatch):
    wf = FakeWorkflow()
    monkeypatch.setattr(cli, 'build_workflow', lambda settings: wf)

    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(main, ['run'], env=EMPTY_ENV)

    assert result.exit_code == 0
    assert wf.runs == 1


def test_run_step_failure_exits_1(monkeypatch, caplog):
    caplog.set_level(logging.INFO)
    wf = FakeWorkflow(UploadFailed('Upload to IPFS failed', cause=ConnectionError('refused')))
    monkeypatch.setattr(cli, 'build_workflow', lambda settings: wf)

    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(main, ['run'], env=EMPTY_ENV)

    assert result.exit_code == 1
    assert wf.runs == 1
    assert 'Error in main process' in caplog.text
    assert 'Upload to IPFS failed' in caplog.text


class FakePinner:
    pinned = []

    def __init__(self, settings):
        self.settings = settings

    def pin_json(self, content, name):
        self.pinned.append((content, name))
        return PinnedContent(local_path=name, cid='QmJson', gateway_url='https://gw/ipfs/')

    def upload_to_ipfs(self, file_path):
        raise AssertionError('file upload used for --json')


def test_upload_json(monkeypatch):
    FakePinner.pinned = []
    monkeypatch.setattr(cli, 'ContentPinner', FakePinner)

    runner = CliRunner()
    with runner.isolated_filesystem():
        with open('meta.json', 'w') as f:
            json.dump({'name': 'NFTree #2'}, f)
        result = runner.invoke(main, ['upload', '--json', 'meta.json'], env=EMPTY_ENV)

    assert result.exit_code == 0
    assert result.output.strip() == 'https://gw/ipfs/QmJson'
    assert FakePinner.pinned == [({'name': 'NFTree #2'}, 'meta.json')]


def test_upload_json_invalid_file(monkeypatch):
    FakePinner.pinned = []
    monkeypatch.setattr(cli, 'ContentPinner', FakePinner)

    runner = CliRunner()
    with runner.isolated_filesystem():
        with open('meta.json', 'w') as f:
            f.write('{not json')
        result = runner.invoke(main, ['upload', '--json', 'meta.json'], env=EMPTY_ENV)

    assert result.exit_code == 1
    assert 'not valid JSON' in result.output
    assert FakePinner.pinned == []


def test_upload_json_missing_file(monkeypatch):
    monkeypatch.setattr(cli, 'ContentPinner', FakePinner)

    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(main, ['upload', '--json', 'absent.json'], env=EMPTY_ENV)

    assert result.exit_code == 1
    assert 'absent.json' in result.output
