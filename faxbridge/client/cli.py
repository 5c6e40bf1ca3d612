import argparse
import logging
import os
import sys
from collections import OrderedDict
from typing import Dict, Optional

import uvicorn
from dotenv import dotenv_values

from faxbridge.faxing.config import FaxConfig
from faxbridge.gateway import FaxGateway
from faxbridge.storage.base import BlobStore
from faxbridge.storage.memory import MemoryBlobStore
from faxbridge.storage.s3 import S3BlobStore

from .client import FaxGatewayClient, FaxGatewayError

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY_URL = 'http://localhost:8787'


class FaxBridgeCli:
    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self):
        parser = argparse.ArgumentParser(description="faxbridge command line interface.")
        parser.add_argument(
            '--env-files',
            type=str,
            action='append',
            metavar='ENV_FILE',
            help="Path to an environment file; repeat the option to load several, later files win.",
            default=None
        )
        subparsers = parser.add_subparsers(dest="command", help="Subcommand to run")

        send = subparsers.add_parser('send', help="Upload a document and fax it.")
        send.add_argument('--to', help="Destination number in E.164 format (env FAX_TO).")
        send.add_argument('--file', help="Path to the document (env FAX_FILE).")
        send.add_argument('--gateway-url', help="Gateway URL (env GATEWAY_URL).")

        serve = subparsers.add_parser('serve', help="Run the gateway with uvicorn.")
        serve.add_argument('--host', default='127.0.0.1')
        serve.add_argument('--port', type=int, default=8787)
        serve.add_argument('--bucket', help="S3 bucket for blobs (env FAXBRIDGE_S3_BUCKET); memory when unset.")
        return parser

    def load_env(self, args) -> Dict[str, str]:
        """Process environment overlaid with the files given in --env-files, in order."""
        merged_env = list(os.environ.items())
        for env_file in args.env_files or []:
            if os.path.exists(env_file) and os.path.isfile(env_file):
                merged_env += list(dotenv_values(env_file).items())
            else:
                self.parser.error(f"{env_file} file not found.")
        return OrderedDict((key, value) for key, value in merged_env if value is not None)

    def _required(self, value: Optional[str], name: str) -> str:
        if not value:
            self.parser.error(f"Missing {name}.")
        return value

    def send(self, args, env: Dict[str, str]) -> int:
        to = self._required(args.to or env.get('FAX_TO'), 'destination (--to or FAX_TO)')
        file_path = self._required(args.file or env.get('FAX_FILE'), 'document (--file or FAX_FILE)')
        gateway_url = args.gateway_url or env.get('GATEWAY_URL') or DEFAULT_GATEWAY_URL

        client = FaxGatewayClient(gateway_url, env.get('GATEWAY_USERNAME'), env.get('GATEWAY_PASSWORD'))
        with open(file_path, 'rb') as document:
            content = document.read()

        print(f"File: {file_path} ({len(content)} bytes)")
        print(f"Gateway: {gateway_url}")
        print(f"To: {to}")
        try:
            result = client.upload_and_send_fax(to, content, os.path.basename(file_path))
        except FaxGatewayError as ex:
            print(f"Failed: {ex}", file=sys.stderr)
            return 1
        print(f"Success: {result}")
        return 0

    def build_blob_store(self, bucket: Optional[str]) -> BlobStore:
        if not bucket:
            logger.warning("No S3 bucket configured, blobs are kept in memory.")
            return MemoryBlobStore()
        return S3BlobStore(bucket)

    def serve(self, args, env: Dict[str, str]) -> int:
        config = FaxConfig(**{key: value for key, value in env.items() if key in FaxConfig.__fields__})
        blob_store = self.build_blob_store(args.bucket or env.get('FAXBRIDGE_S3_BUCKET'))
        gateway = FaxGateway(config, blob_store)

        logger.info("Serving faxbridge (%s) on http://%s:%s", config.FAX_PROVIDER, args.host, args.port)
        uvicorn.run(gateway.app, host=args.host, port=args.port)
        return 0

    def run(self, argv=None) -> int:
        args = self.parser.parse_args(argv)
        if args.command is None:
            self.parser.print_help()
            return 1

        env = self.load_env(args)
        if args.command == 'send':
            return self.send(args, env)
        return self.serve(args, env)


def main():
    logging.basicConfig(level=logging.INFO)
    sys.exit(FaxBridgeCli().run())


if __name__ == '__main__':
    main()
