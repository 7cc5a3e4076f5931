#!/usr/bin/env python
#
# Command line for the NFTree workflow. Install with:
#
#   pip install --editable .
#
# which puts "nftree" in your path. Settings come from the environment or a
# .env file in the current directory.
#
import json
import logging
import os
import sys

import click
from dotenv import load_dotenv

from attestation_client import AttestationClient
from chain import Signer, connect
from content_pinner import ContentPinner
from errors import FileNotFound, MissingConfiguration, NFTreeError
from models import ReceiptSummary
from settings import Settings
from token_minter import TokenMinter
from workflow import build_workflow, save_attestation_record

logger = logging.getLogger('nftree')


def fail(msg):
    # show message and stop
    click.echo(f"FAILURE: {msg}", err=True)
    sys.exit(1)


def load_settings():
    try:
        return Settings.from_env()
    except NFTreeError as exc:
        fail(str(exc))


@click.group()
@click.option('--env-file', type=click.Path(dir_okay=False), default='.env',
              help='Read settings from this file first')
@click.option('--verbose', '-v', is_flag=True, help='Debug logging')
def main(env_file, verbose):
    load_dotenv(env_file)
    level = 'DEBUG' if verbose else load_settings().log_level
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')


@main.command('run')
def run_cmd():
    "Attest, record the UID, pin the metadata file and mint the token"
    settings = load_settings()
    try:
        build_workflow(settings).run_workflow()
    except Exception as exc:
        logger.debug('Workflow traceback', exc_info=True)
        logger.error(f'Error in main process: {exc}')
        sys.exit(1)


@main.command('attest')
@click.option('--save/--no-save', default=True, help='Write the UID record file')
def attest_cmd(save):
    "Create the attestation only"
    settings = load_settings()
    try:
        settings.require(MissingConfiguration, 'rpc_url', 'private_key')
        web3 = connect(settings.rpc_url, timeout=settings.rpc_timeout)
        uid = AttestationClient(web3, Signer(settings.private_key), settings).create_attestation()
    except NFTreeError as exc:
        fail(str(exc))

    if save:
        save_attestation_record(settings.attestation_file, uid)
    click.echo(uid)


@main.command('upload')
@click.argument('file_path', type=click.Path(dir_okay=False), required=False)
@click.option('--json', 'as_json', is_flag=True,
              help='Parse the file as JSON and pin it as a JSON document')
def upload_cmd(file_path, as_json):
    "Pin a file (default: METADATA_FILE) and print its gateway URL"
    settings = load_settings()
    path = file_path or settings.metadata_file
    try:
        pinner = ContentPinner(settings)
        if as_json:
            if not os.path.isfile(path):
                raise FileNotFound(path)
            with open(path, encoding='utf-8') as f:
                content = json.load(f)
            url = pinner.pin_json(content, os.path.basename(path)).url
        else:
            url = pinner.upload_to_ipfs(path)
    except json.JSONDecodeError as exc:
        fail(f'{path} is not valid JSON: {exc}')
    except NFTreeError as exc:
        fail(str(exc))

    click.echo(url)


@main.command('mint')
@click.argument('metadata_uri')
@click.option('--to', 'recipient', default=None, help='Recipient (default: RECIPIENT_ADDRESS)')
@click.option('--token-id', type=int, default=None, help='Token class (default: TOKEN_ID)')
@click.option('--amount', type=click.IntRange(min=0), default=None, help='Quantity (default: MINT_AMOUNT)')
def mint_cmd(metadata_uri, recipient, token_id, amount):
    "Mint tokens pointing at METADATA_URI"
    settings = load_settings()
    recipient = recipient or settings.recipient_address
    if not recipient:
        fail("RECIPIENT_ADDRESS is not configured.")

    try:
        receipt = TokenMinter(settings).mint_token(
            recipient,
            settings.token_id if token_id is None else token_id,
            settings.mint_amount if amount is None else amount,
            metadata_uri)
    except NFTreeError as exc:
        fail(str(exc))

    click.echo(ReceiptSummary.from_receipt(receipt).tx_hash)


@main.command('update-metadata')
@click.argument('token_id', type=int)
@click.argument('metadata_uri')
def update_metadata_cmd(token_id, metadata_uri):
    "Point an already minted token class at new metadata"
    settings = load_settings()
    try:
        TokenMinter(settings).update_token_metadata(token_id, metadata_uri)
    except NFTreeError as exc:
        fail(str(exc))


@main.command('token-metadata')
@click.argument('token_id', type=int)
@click.option('--history', is_flag=True, help='Show every URI the token ever had')
def token_metadata_cmd(token_id, history):
    "Show the current metadata URI of a token class"
    settings = load_settings()
    try:
        minter = TokenMinter(settings)
        if history:
            for n, uri in enumerate(minter.get_metadata_history(token_id)):
                click.echo(f'{n}: {uri}')
        else:
            click.echo(minter.get_token_metadata(token_id))
    except NFTreeError as exc:
        fail(str(exc))


if __name__ == '__main__':
    main()
